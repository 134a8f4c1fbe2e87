"""Declarative rule model used by the offline pattern engine."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Sequence, Union

from ..context import RuleContext
from ..models import IssueType, RuleCategory, Severity

SuggestionResult = Union[str, Sequence[str], None]
SuggestionFn = Callable[["re.Match[str]", Union[RuleContext, None]], SuggestionResult]
ContextFilter = Callable[[RuleContext, "re.Match[str]"], bool]

_PLACEHOLDER_RE = re.compile(r"\{(match|\d+)\}")


@dataclass(frozen=True)
class Rule:
    """A single textual pattern plus the metadata of the finding it produces.

    Rules are pure: the same text always yields the same matches. The
    optional ``suggestion`` callable returns one replacement or an ordered
    list (the first entry is the default). The optional ``context_filter``
    can veto a match by returning ``False``.
    """

    id: str
    pattern: str
    message: str
    type: IssueType
    severity: Severity
    category: RuleCategory
    flags: int = re.IGNORECASE
    suggestion: SuggestionFn | None = None
    context_filter: ContextFilter | None = None
    explanation: str | None = None

    @property
    def needs_context(self) -> bool:
        return self.suggestion is not None or self.context_filter is not None

    def compile(self) -> "re.Pattern[str]":
        return re.compile(self.pattern, self.flags)

    def render_message(self, match: "re.Match[str]") -> str:
        """Fill ``{match}`` and ``{N}`` placeholders from the regex match."""

        def _replace(placeholder: "re.Match[str]") -> str:
            key = placeholder.group(1)
            if key == "match":
                return match.group(0)
            index = int(key)
            if index > (match.re.groups or 0):
                return placeholder.group(0)
            return match.group(index) or ""

        return _PLACEHOLDER_RE.sub(_replace, self.message)

    def suggestions_for(self, match: "re.Match[str]", context: RuleContext | None) -> list[str]:
        if self.suggestion is None:
            return []
        result = self.suggestion(match, context)
        if result is None:
            return []
        if isinstance(result, str):
            return [result]
        return list(result)

    def accepts(self, match: "re.Match[str]", context: RuleContext | None) -> bool:
        if self.context_filter is None or context is None:
            return True
        return bool(self.context_filter(context, match))
