"""The offline rule corpus.

Rules are grouped by :class:`RuleCategory` and kept in a fixed order; the
pattern engine evaluates them in this order, which makes discovery order
(and therefore overlap tie-breaking) deterministic.

Suggestion callables receive the regex match and (optionally) the rule
context and return either one replacement or an ordered list of
replacements for the whole matched span.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, Mapping

from ..context import RuleContext, ends_with_abbreviation
from ..models import IssueType, RuleCategory, Severity, SectionType
from ..utils.text_utils import match_case, pluralise
from .rule import Rule, SuggestionFn

_ERROR = Severity.ERROR
_WARNING = Severity.WARNING
_INFO = Severity.INFO


# ---------------------------------------------------------------------------
# Suggestion and filter helpers
# ---------------------------------------------------------------------------


def _fixed(*replacements: str) -> SuggestionFn:
    def _suggest(match: "re.Match[str]", context: RuleContext | None) -> list[str]:
        return [match_case(match.group(0), item) for item in replacements]

    return _suggest


def _replace_group(group: int, replacement: str) -> SuggestionFn:
    """Swap one capture group for ``replacement`` and keep the rest of the match."""

    def _suggest(match: "re.Match[str]", context: RuleContext | None) -> str:
        whole = match.group(0)
        base = match.start()
        start, end = match.start(group) - base, match.end(group) - base
        return whole[:start] + match_case(match.group(group), replacement) + whole[end:]

    return _suggest


def _group(group: int) -> SuggestionFn:
    def _suggest(match: "re.Match[str]", context: RuleContext | None) -> str:
        return match.group(group)

    return _suggest


def _lookup(table: Mapping[str, str | Iterable[str]], group: int = 0) -> SuggestionFn:
    """Replace the matched group using a lowercase lookup table."""

    def _suggest(match: "re.Match[str]", context: RuleContext | None) -> list[str]:
        source = match.group(group)
        key = re.sub(r"\s+", " ", source.lower().replace("’", "'"))
        found = table.get(key)
        if found is None:
            return []
        options = [found] if isinstance(found, str) else list(found)
        whole = match.group(0)
        base = match.start()
        start, end = match.start(group) - base, match.end(group) - base
        return [whole[:start] + match_case(source, option) + whole[end:] for option in options]

    return _suggest


def _alternation(words: Iterable[str]) -> str:
    # Longest first so that "occurence" wins over "occur" style prefixes.
    ordered = sorted(set(words), key=lambda item: (-len(item), item))
    return "|".join(re.escape(word).replace(r"\ ", r"\s+") for word in ordered)


def _outside_quotation(context: RuleContext, match: "re.Match[str]") -> bool:
    return not context.in_quotation()


def _outside_citation(context: RuleContext, match: "re.Match[str]") -> bool:
    return not context.in_citation()


def _in_sections(*sections: SectionType) -> Callable[[RuleContext, "re.Match[str]"], bool]:
    allowed = frozenset(sections)

    def _filter(context: RuleContext, match: "re.Match[str]") -> bool:
        return context.section in allowed

    return _filter


# ---------------------------------------------------------------------------
# General grammar
# ---------------------------------------------------------------------------

_QUANTIFIERS = ("many", "several", "numerous", "various", "multiple", "few", "both")

_COUNTABLE_NOUNS = (
    "mistake", "error", "problem", "study", "result", "participant", "sample",
    "method", "approach", "factor", "issue", "reason", "example", "variable",
    "experiment", "researcher", "question", "difference", "finding", "paper",
    "article", "author", "student", "teacher", "case", "effect", "trial", "test",
    "observation", "measurement", "model", "analysis", "hypothesis", "criterion",
    "phenomenon", "child", "person", "woman", "man",
)

_IRREGULAR_PLURALS = {
    "analysis": "analyses",
    "hypothesis": "hypotheses",
    "criterion": "criteria",
    "phenomenon": "phenomena",
    "child": "children",
    "person": "people",
    "woman": "women",
    "man": "men",
}


def _pluralise_noun(match: "re.Match[str]", context: RuleContext | None) -> str:
    return f"{match.group(1)} {pluralise(match.group(2), _IRREGULAR_PLURALS)}"


_SINGULAR_VERBS = {"are": "is", "were": "was", "have": "has"}
_PLURAL_VERBS = {"is": "are", "was": "were", "has": "have"}

# Words that may follow "a"/"that" and still take a plural verb (quantity
# nouns, plural-only nouns, and pronouns after a relative "that").
_SINGULAR_DETERMINER_EXCEPTIONS = frozenset(
    {"few", "lot", "number", "couple", "majority", "minority", "variety", "range", "series", "data",
     "criteria", "phenomena", "people", "media", "police", "staff", "children", "men", "women",
     "they", "we", "you", "i", "these", "those", "who", "which", "most", "many", "all", "both", "some", "others"}
)


def _swap_verb(table: Mapping[str, str]) -> SuggestionFn:
    def _suggest(match: "re.Match[str]", context: RuleContext | None) -> str:
        verb_group = match.re.groups
        return _replace_group(verb_group, table[match.group(verb_group).lower()])(match, context)

    return _suggest


def _singular_subject(context: RuleContext, match: "re.Match[str]") -> bool:
    noun = match.group(1).lower()
    if noun in _SINGULAR_DETERMINER_EXCEPTIONS:
        return False
    # Words ending in "s" after a singular determiner are usually mass nouns
    # ("this analysis", "a series") rather than disagreements.
    return not noun.endswith("s")


_LATIN_PLURALS = {
    "criteria": "criterion",
    "phenomena": "phenomenon",
    "analyses": "analysis",
    "hypotheses": "hypothesis",
    "theses": "thesis",
    "strata": "stratum",
    "bacteria": "bacterium",
}
_LATIN_SINGULARS = {singular: plural for plural, singular in _LATIN_PLURALS.items()}
_LATIN_SINGULARS.update({"appendix": "appendices", "datum": "data"})


def _latin_plural_options(match: "re.Match[str]", context: RuleContext | None) -> list[str]:
    noun, verb = match.group(1), match.group(2)
    singular = _LATIN_PLURALS[noun.lower()]
    return [
        f"{noun} {match_case(verb, _PLURAL_VERBS[verb.lower()])}",
        f"{match_case(noun, singular)} {verb}",
    ]


def _latin_singular_options(match: "re.Match[str]", context: RuleContext | None) -> list[str]:
    noun, verb = match.group(1), match.group(2)
    plural = _LATIN_SINGULARS[noun.lower()]
    return [
        f"{match_case(noun, plural)} {verb}",
        f"{noun} {match_case(verb, _SINGULAR_VERBS[verb.lower()])}",
    ]


_A_BEFORE_VOWEL_LETTER = re.compile(r"^(?:uni|use|usu|usa|uti|ure|uri|uro|eu|ewe|one|once|ubiq)", re.IGNORECASE)


def _a_before_vowel(context: RuleContext, match: "re.Match[str]") -> bool:
    article, word = match.group(1), match.group(2)
    if _A_BEFORE_VOWEL_LETTER.match(word):
        return False
    if word.isupper() and len(word) > 1:
        # Acronyms are read letter by letter; leave them to the writer.
        return False
    # A capital "A" mid-sentence is usually a label ("Type A and B").
    return not (article == "A" and not context.at_sentence_start())


def _an_before_consonant(context: RuleContext, match: "re.Match[str]") -> bool:
    word = match.group(2)
    if word.isupper():
        # "an MRI", "an SD", "an FBI agent"
        return False
    return not (len(word) == 1 or word.lower().startswith(("x-ray", "mri", "fmri")))


def _capitalise_first(match: "re.Match[str]", context: RuleContext | None) -> str:
    word = match.group(0)
    return word[:1].upper() + word[1:]


def _sentence_start_lowercase(context: RuleContext, match: "re.Match[str]") -> bool:
    if context.in_quotation():
        return False
    text = context.text
    punct_at = match.start() - 2
    if punct_at < 0:
        return False
    if text[max(0, punct_at - 2) : punct_at + 1] == "...":
        return False
    if text[punct_at] == "." and ends_with_abbreviation(text, punct_at + 1, include_non_terminal=True):
        return False
    # "e.g." / "i.e." written in lowercase after a full stop
    return not text.startswith(".", match.end())


_PAST_TENSE = {
    "show": "showed",
    "demonstrate": "demonstrated",
    "indicate": "indicated",
    "reveal": "revealed",
    "suggest": "suggested",
    "confirm": "confirmed",
}


def _past_tense(match: "re.Match[str]", context: RuleContext | None) -> str:
    return match_case(match.group(0), _PAST_TENSE[match.group(2).lower()])


def _not_numeric_repeat(context: RuleContext, match: "re.Match[str]") -> bool:
    return not match.group(1).isdigit()


GRAMMAR_RULES: tuple[Rule, ...] = (
    Rule(
        id="gram-001",
        pattern=r"\b(their)\s+(are|is|was|were)\b",
        message='Incorrect use of "{1}". Did you mean "there {2}"?',
        type=IssueType.GRAMMAR,
        severity=_ERROR,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "there"),
        explanation='"Their" is possessive; "there" introduces existence.',
    ),
    Rule(
        id="gram-002",
        pattern=r"\b(could|would|should|must|might)\s+of\b",
        message='"{1} of" is incorrect; use "{1} have".',
        type=IssueType.GRAMMAR,
        severity=_ERROR,
        category=RuleCategory.GRAMMAR,
        suggestion=lambda match, context: f"{match.group(1)} have",
    ),
    Rule(
        id="gram-003",
        pattern=r"\b(its)\s+a\b",
        message='"its" is possessive. Did you mean "it is"?',
        type=IssueType.GRAMMAR,
        severity=_ERROR,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "it is"),
    ),
    Rule(
        id="gram-004",
        pattern=r"\b(\w+)\s+\1\b",
        message='Repeated word: "{1}".',
        type=IssueType.GRAMMAR,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_group(1),
        context_filter=_not_numeric_repeat,
    ),
    Rule(
        id="gram-005",
        pattern=rf"\b({'|'.join(_QUANTIFIERS)})\s+({'|'.join(_COUNTABLE_NOUNS)})\b",
        message='"{1}" takes a plural noun; "{2}" should be plural.',
        type=IssueType.GRAMMAR,
        severity=_ERROR,
        category=RuleCategory.GRAMMAR,
        suggestion=_pluralise_noun,
    ),
    Rule(
        id="art-001",
        pattern=r"\b(a)\s+([aeiou][\w-]*)",
        message='Use "an" before a vowel sound: "{2}".',
        type=IssueType.GRAMMAR,
        severity=_ERROR,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "an"),
        context_filter=_a_before_vowel,
    ),
    Rule(
        id="art-002",
        pattern=r"\b(a)\s+((?:hour|honest|honou?r|heir)\w*)",
        message='Use "an" before a silent "h": "{2}".',
        type=IssueType.GRAMMAR,
        severity=_ERROR,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "an"),
    ),
    Rule(
        id="art-003",
        pattern=r"\b(an)\s+([bcdfgjklmnpqrstvwxyz][\w-]*)",
        message='Use "a" before a consonant sound: "{2}".',
        type=IssueType.GRAMMAR,
        severity=_ERROR,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "a"),
        context_filter=_an_before_consonant,
    ),
    Rule(
        id="svagr-001",
        pattern=r"\b(?:this|that|a|an|one|each|every)\s+(\w+)\s+(are|were|have)\b",
        message='Subject-verb agreement: singular "{1}" with plural verb "{2}".',
        type=IssueType.GRAMMAR,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_swap_verb(_SINGULAR_VERBS),
        context_filter=_singular_subject,
    ),
    Rule(
        id="svagr-002",
        pattern=r"\b(?:these|those|several|many)\s+(\w+s)\s+(is|was|has)\b",
        message='Subject-verb agreement: plural "{1}" with singular verb "{2}".',
        type=IssueType.GRAMMAR,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_swap_verb(_PLURAL_VERBS),
    ),
    Rule(
        id="svagr-003",
        pattern=r"\b(data)\s+(is|was|has)\b",
        message='"data" is plural in formal academic writing; use a plural verb.',
        type=IssueType.GRAMMAR,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_swap_verb(_PLURAL_VERBS),
    ),
    Rule(
        id="svagr-004",
        pattern=rf"\b({'|'.join(_LATIN_PLURALS)})\s+(is|was|has)\b",
        message='"{1}" is plural; use a plural verb or the singular noun.',
        type=IssueType.GRAMMAR,
        severity=_ERROR,
        category=RuleCategory.GRAMMAR,
        suggestion=_latin_plural_options,
    ),
    Rule(
        id="conf-001",
        pattern=r"\b(?:the|an|this|no|any|significant|positive|negative|adverse|main)\s+(affect)\b",
        message='"affect" is usually a verb; the noun is "effect".',
        type=IssueType.GRAMMAR,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "effect"),
    ),
    Rule(
        id="conf-002",
        pattern=r"\b(?:to|will|may|might|could|can|would|not|does|did)\s+(effect)\s+(?:the|our|this|these|their|its)\b",
        message='"effect" as a verb means "to bring about"; did you mean "affect"?',
        type=IssueType.GRAMMAR,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "affect"),
    ),
    Rule(
        id="conf-003",
        pattern=r"\b(principle)\s+(?:finding|result|reason|cause|factor|outcome|investigator|component|aim)s?\b",
        message='"principle" means a rule; the adjective meaning "main" is "principal".',
        type=IssueType.SPELLING,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "principal"),
    ),
    Rule(
        id="conf-004",
        pattern=(
            r"\b(?:more|less|fewer|better|worse|greater|higher|lower|larger|smaller|faster|slower"
            r"|longer|shorter|stronger|weaker|older|younger|rather|other|earlier|later)\s+(then)\b"
        ),
        message='Use "than" for comparisons.',
        type=IssueType.GRAMMAR,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "than"),
    ),
    Rule(
        id="conf-005",
        pattern=r"\b(its)\s+(important|necessary|essential|possible|likely|unclear|clear|evident)\b",
        message='"its" is possessive. Did you mean "it is"?',
        type=IssueType.GRAMMAR,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "it is"),
    ),
    Rule(
        id="conf-006",
        pattern=r"\b(less)\s+(participants|people|studies|errors|items|students|subjects|samples|cases|respondents)\b",
        message='Use "fewer" with countable nouns.',
        type=IssueType.GRAMMAR,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "fewer"),
    ),
    Rule(
        id="conf-007",
        pattern=r"\b(amount)\s+of\s+(?:participants|people|studies|errors|items|students|subjects|samples|cases|respondents)\b",
        message='Use "number" with countable nouns.',
        type=IssueType.GRAMMAR,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_replace_group(1, "number"),
    ),
    Rule(
        id="cap-001",
        pattern=r"(?<=[.!?]\s)[a-z]+\b",
        flags=0,
        message="Sentences should begin with a capital letter.",
        type=IssueType.GRAMMAR,
        severity=_WARNING,
        category=RuleCategory.GRAMMAR,
        suggestion=_capitalise_first,
        context_filter=_sentence_start_lowercase,
    ),
    Rule(
        id="tense-001",
        pattern=r"\b(?:was|were)\s+\w+ing\s+and\s+\w+ed\b",
        message="Inconsistent verb tense within a coordinated phrase.",
        type=IssueType.GRAMMAR,
        severity=_INFO,
        category=RuleCategory.GRAMMAR,
    ),
    Rule(
        id="tense-002",
        pattern=r"\b(will|shall)\s+(show|demonstrate|indicate|reveal|suggest|confirm)\b",
        message="Report completed results in the past tense.",
        type=IssueType.GRAMMAR,
        severity=_INFO,
        category=RuleCategory.GRAMMAR,
        suggestion=_past_tense,
        context_filter=_in_sections(SectionType.RESULTS),
    ),
)


# ---------------------------------------------------------------------------
# Academic tone
# ---------------------------------------------------------------------------

_NEGATED_CONTRACTIONS = {
    "don't": "do not",
    "doesn't": "does not",
    "didn't": "did not",
    "won't": "will not",
    "wouldn't": "would not",
    "can't": "cannot",
    "couldn't": "could not",
    "shouldn't": "should not",
    "isn't": "is not",
    "aren't": "are not",
    "wasn't": "was not",
    "weren't": "were not",
    "hasn't": "has not",
    "haven't": "have not",
    "hadn't": "had not",
}

_PRONOUN_CONTRACTIONS = {
    "it's": "it is",
    "that's": "that is",
    "there's": "there is",
    "here's": "here is",
    "what's": "what is",
    "let's": "let us",
    "i'm": "I am",
    "we're": "we are",
    "they're": "they are",
    "you're": "you are",
    "we've": "we have",
    "i've": "I have",
    "they've": "they have",
    "i'll": "I will",
    "we'll": "we will",
    "they'll": "they will",
}

_INFORMAL_WORDS = {
    "gonna": "going to",
    "wanna": "want to",
    "gotta": "have to",
    "kinda": "somewhat",
    "sorta": "somewhat",
    "dunno": "do not know",
}

_VAGUE_WORDS = {
    "stuff": ("material", "content"),
    "things": ("aspects", "factors"),
    "lots of": ("many", "numerous"),
    "a lot of": ("many", "considerable"),
    "a bunch of": ("several", "many"),
}

_ABSOLUTES = {
    "always": ("often", "typically"),
    "never": ("rarely", "seldom"),
    "undoubtedly": ("likely",),
    "unquestionably": ("arguably",),
    "certainly": ("likely",),
}

_PROOF_WORDS = {
    "proves": ("demonstrates", "indicates", "suggests"),
    "prove": ("demonstrate", "indicate", "suggest"),
    "proved": ("demonstrated", "indicated", "suggested"),
    "proven": ("demonstrated", "established"),
    "proof": ("evidence",),
}


def _contraction_pattern(table: Mapping[str, str]) -> str:
    return r"\b(" + _alternation(table).replace("'", "['’]") + r")\b"


def _informal_size(match: "re.Match[str]", context: RuleContext | None) -> list[str]:
    noun = match.group(2)
    return [f"{match_case(match.group(1), option)} {noun}" for option in ("substantial", "considerable", "notable")]


def _weak_intensifier(context: RuleContext, match: "re.Match[str]") -> bool:
    return match.group(2).lower() not in {"than", "a", "an", "the"}


TONE_RULES: tuple[Rule, ...] = (
    Rule(
        id="tone-001",
        pattern=_contraction_pattern(_NEGATED_CONTRACTIONS),
        message='Avoid contractions in academic writing: "{1}".',
        type=IssueType.STYLE,
        severity=_WARNING,
        category=RuleCategory.ACADEMIC_TONE,
        suggestion=_lookup(_NEGATED_CONTRACTIONS),
        context_filter=_outside_quotation,
    ),
    Rule(
        id="tone-002",
        pattern=_contraction_pattern(_PRONOUN_CONTRACTIONS),
        message='Avoid contractions in academic writing: "{1}".',
        type=IssueType.STYLE,
        severity=_WARNING,
        category=RuleCategory.ACADEMIC_TONE,
        suggestion=_lookup(_PRONOUN_CONTRACTIONS),
        context_filter=_outside_quotation,
    ),
    Rule(
        id="inf-001",
        pattern=rf"\b({_alternation(_INFORMAL_WORDS)})\b",
        message='"{1}" is too informal for academic writing.',
        type=IssueType.STYLE,
        severity=_ERROR,
        category=RuleCategory.ACADEMIC_TONE,
        suggestion=_lookup(_INFORMAL_WORDS),
    ),
    Rule(
        id="inf-002",
        pattern=rf"\b({_alternation(_VAGUE_WORDS)})\b",
        message='"{1}" is vague; prefer a precise term.',
        type=IssueType.STYLE,
        severity=_WARNING,
        category=RuleCategory.ACADEMIC_TONE,
        suggestion=_lookup(_VAGUE_WORDS),
        context_filter=_outside_quotation,
    ),
    Rule(
        id="inf-003",
        pattern=r"\b(big|huge|tiny)\s+(difference|effect|impact|change|increase|decrease|improvement)\b",
        message='"{1}" is informal; prefer a measured adjective.',
        type=IssueType.STYLE,
        severity=_WARNING,
        category=RuleCategory.ACADEMIC_TONE,
        suggestion=_informal_size,
    ),
    Rule(
        id="inf-004",
        pattern=r"\b(pretty|really|super|totally|basically|actually)\s+(\w+)",
        message='Remove the informal intensifier "{1}".',
        type=IssueType.STYLE,
        severity=_WARNING,
        category=RuleCategory.ACADEMIC_TONE,
        suggestion=_group(2),
        context_filter=_outside_quotation,
    ),
    Rule(
        id="fp-001",
        pattern=r"\b(?:I\s+(?:think|believe|feel)|in\s+my\s+opinion)\b",
        message="Present claims through evidence rather than personal opinion.",
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.ACADEMIC_TONE,
        context_filter=_outside_quotation,
    ),
    Rule(
        id="fp-002",
        pattern=r"\bI\s+(?:will|have|conducted|performed|analysed|analyzed|found)\b",
        message="Consider whether the first person suits the target venue.",
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.ACADEMIC_TONE,
        context_filter=_outside_quotation,
    ),
    Rule(
        id="abs-001",
        pattern=rf"\b({_alternation(_ABSOLUTES)})\b",
        message='"{1}" is an absolute claim; consider hedging.',
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.ACADEMIC_TONE,
        suggestion=_lookup(_ABSOLUTES),
        context_filter=_outside_quotation,
    ),
    Rule(
        id="abs-002",
        pattern=rf"\b({_alternation(_PROOF_WORDS)})\b",
        message='Empirical work rarely "proves"; consider a weaker verb.',
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.ACADEMIC_TONE,
        suggestion=_lookup(_PROOF_WORDS),
        context_filter=_outside_quotation,
    ),
    Rule(
        id="hedge-001",
        pattern=r"\b(maybe|perhaps|possibly)\s+(?:maybe|perhaps|possibly)\b",
        message="Double hedging weakens the claim.",
        type=IssueType.STYLE,
        severity=_WARNING,
        category=RuleCategory.ACADEMIC_TONE,
        suggestion=_group(1),
    ),
    Rule(
        id="hedge-002",
        pattern=r"\b(might|may|could|would)\s+(?:possibly|perhaps|maybe)\b",
        message='"{1}" already hedges; drop the extra qualifier.',
        type=IssueType.STYLE,
        severity=_WARNING,
        category=RuleCategory.ACADEMIC_TONE,
        suggestion=_group(1),
    ),
    Rule(
        id="weak-001",
        pattern=r"\b(very|quite|rather|somewhat|fairly)\s+(\w+)",
        message='"{1}" is a weak intensifier; consider a stronger word.',
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.ACADEMIC_TONE,
        suggestion=_group(2),
        context_filter=_weak_intensifier,
    ),
)


# ---------------------------------------------------------------------------
# Citation and methodology wording
# ---------------------------------------------------------------------------

CITATION_RULES: tuple[Rule, ...] = (
    Rule(
        id="cite-001",
        pattern=r"\b(?:et\.\s*al|etal)\b\.?",
        message='Write "et al." with a space and a single period after "al".',
        type=IssueType.PUNCTUATION,
        severity=_ERROR,
        category=RuleCategory.CITATION,
        suggestion=_fixed("et al."),
    ),
    Rule(
        id="cite-002",
        pattern=r"\bet\s+al\b(?!\.)",
        message='"et al." requires a period after "al".',
        type=IssueType.PUNCTUATION,
        severity=_ERROR,
        category=RuleCategory.CITATION,
        suggestion=_fixed("et al."),
    ),
    Rule(
        id="latin-001",
        pattern=r"\bi\.e\b(?!\.)",
        message='Write "i.e." with both periods.',
        type=IssueType.PUNCTUATION,
        severity=_WARNING,
        category=RuleCategory.CITATION,
        suggestion=_fixed("i.e."),
    ),
    Rule(
        id="latin-002",
        pattern=r"\be\.g\b(?!\.)",
        message='Write "e.g." with both periods.',
        type=IssueType.PUNCTUATION,
        severity=_WARNING,
        category=RuleCategory.CITATION,
        suggestion=_fixed("e.g."),
    ),
    Rule(
        id="latin-003",
        pattern=r"\b(?:i\.e\.|e\.g\.)(?!\s*,)",
        message='"{match}" is normally followed by a comma.',
        type=IssueType.PUNCTUATION,
        severity=_INFO,
        category=RuleCategory.CITATION,
        suggestion=lambda match, context: match.group(0) + ",",
    ),
    Rule(
        id="latin-004",
        pattern=r"\bvs\b(?!\.)",
        message='Write "vs." with a period.',
        type=IssueType.PUNCTUATION,
        severity=_WARNING,
        category=RuleCategory.CITATION,
        suggestion=_fixed("vs."),
    ),
    Rule(
        id="latin-005",
        pattern=r"\b(ie|eg)(?=,)",
        message='Abbreviate as "i.e." or "e.g." with periods.',
        type=IssueType.PUNCTUATION,
        severity=_WARNING,
        category=RuleCategory.CITATION,
        suggestion=_lookup({"ie": "i.e.", "eg": "e.g."}, group=1),
    ),
    Rule(
        id="meth-001",
        pattern=r"\b(?:we|I)\s+(looked\s+at|checked\s+out|figured\s+out|found\s+out)\b",
        message="Use precise methodological verbs in place of informal phrasal verbs.",
        type=IssueType.STYLE,
        severity=_WARNING,
        category=RuleCategory.CITATION,
        suggestion=_lookup(
            {
                "looked at": ("examined", "analysed"),
                "checked out": ("examined", "verified"),
                "figured out": ("determined", "established"),
                "found out": ("discovered", "determined"),
            },
            group=1,
        ),
    ),
    Rule(
        id="meth-002",
        pattern=r"\b(?:random|randomly)\s+(?:picked|chose|chosen|grabbed)\b",
        message='Describe sampling precisely, e.g. "randomly selected".',
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.CITATION,
        suggestion=_fixed("randomly selected"),
    ),
)


# ---------------------------------------------------------------------------
# Punctuation
# ---------------------------------------------------------------------------

_URLISH_RE = re.compile(r"(?:://|www\.|@|\.(?:com|org|net|edu|gov|ac|uk|io)\b)", re.IGNORECASE)


def _oxford_comma(match: "re.Match[str]", context: RuleContext | None) -> str:
    return f"{match.group(1)}, {match.group(2)}, and {match.group(3)}"


def _missing_space(context: RuleContext, match: "re.Match[str]") -> bool:
    text = context.text
    token_start = match.start()
    while token_start > 0 and not text[token_start - 1].isspace():
        token_start -= 1
    token_end = match.end()
    while token_end < len(text) and not text[token_end].isspace():
        token_end += 1
    if _URLISH_RE.search(text[token_start:token_end]):
        return False
    if match.group(0) == ".":
        return not ends_with_abbreviation(text, match.end())
    return True


def _closing_quote(context: RuleContext, match: "re.Match[str]") -> bool:
    if match.group(1) == "”":
        return True
    return context.in_quotation()


PUNCTUATION_RULES: tuple[Rule, ...] = (
    Rule(
        id="punct-001",
        pattern=r"\b(\w+),\s+(\w+)\s+and\s+(\w+)\b",
        message="Consider a serial (Oxford) comma before the final list item.",
        type=IssueType.PUNCTUATION,
        severity=_INFO,
        category=RuleCategory.PUNCTUATION,
        suggestion=_oxford_comma,
    ),
    Rule(
        id="punct-003",
        pattern=r";\s*(?=[A-Z][a-z])",
        flags=0,
        message="The word after a semicolon is not normally capitalised.",
        type=IssueType.PUNCTUATION,
        severity=_INFO,
        category=RuleCategory.PUNCTUATION,
        context_filter=_outside_citation,
    ),
    Rule(
        id="punct-004",
        pattern=r":[ \t]*(?=[a-z])",
        flags=0,
        message="Capitalise after a colon when a complete sentence follows.",
        type=IssueType.PUNCTUATION,
        severity=_INFO,
        category=RuleCategory.PUNCTUATION,
    ),
    Rule(
        id="punct-005",
        pattern=(
            r"\b(well|high|low|multi|cross|non|co|pre|post)\s+"
            r"(known|established|defined|designed|sectional|dimensional|invasive|operative|existing|quality)\b"
        ),
        message='Hyphenate the compound modifier "{1}-{2}".',
        type=IssueType.PUNCTUATION,
        severity=_INFO,
        category=RuleCategory.PUNCTUATION,
        suggestion=lambda match, context: f"{match.group(1)}-{match.group(2)}",
    ),
    Rule(
        id="punct-006",
        pattern=r"\b(long|short|small|large)\s+(term|scale)(?=\s+(?!and\b|or\b|in\b|of\b|to\b|the\b)[a-z]{3,})",
        message='Hyphenate the compound modifier "{1}-{2}".',
        type=IssueType.PUNCTUATION,
        severity=_INFO,
        category=RuleCategory.PUNCTUATION,
        suggestion=lambda match, context: f"{match.group(1)}-{match.group(2)}",
    ),
    Rule(
        id="punct-007",
        pattern=r"([\"”])([.,])",
        message="In American English, periods and commas go inside closing quotation marks.",
        type=IssueType.PUNCTUATION,
        severity=_INFO,
        category=RuleCategory.PUNCTUATION,
        suggestion=lambda match, context: match.group(2) + match.group(1),
        context_filter=_closing_quote,
    ),
    Rule(
        id="punct-008",
        pattern=r"[ \t]+([,.:;!?])(?!\d)",
        message="Remove the space before punctuation.",
        type=IssueType.PUNCTUATION,
        severity=_ERROR,
        category=RuleCategory.PUNCTUATION,
        suggestion=_group(1),
        context_filter=lambda context, match: not context.text.startswith("..", match.end(1)),
    ),
    Rule(
        id="punct-009",
        pattern=r"(?<=[a-z0-9)])\.(?=[A-Z][a-z])|[,;!?](?=[A-Za-z])|(?<=[A-Za-z]):(?=[A-Za-z])",
        flags=0,
        message="Add a space after punctuation.",
        type=IssueType.PUNCTUATION,
        severity=_ERROR,
        category=RuleCategory.PUNCTUATION,
        suggestion=lambda match, context: match.group(0) + " ",
        context_filter=_missing_space,
    ),
    Rule(
        id="punct-010",
        pattern=r"\b(?:it['’]s|its['’])\s+(own|role|effect|impact|influence)\b",
        message='The possessive form is "its" without an apostrophe.',
        type=IssueType.GRAMMAR,
        severity=_ERROR,
        category=RuleCategory.PUNCTUATION,
        suggestion=lambda match, context: match_case(match.group(0), f"its {match.group(1)}"),
    ),
    Rule(
        id="punct-011",
        pattern=r"\b(\d{4})['’]s\b",
        message="Decades take no apostrophe: {1}s.",
        type=IssueType.PUNCTUATION,
        severity=_WARNING,
        category=RuleCategory.PUNCTUATION,
        suggestion=lambda match, context: f"{match.group(1)}s",
    ),
    Rule(
        id="punct-012",
        pattern=r"\.{3,}(?=\w)",
        message="Add a space after the ellipsis.",
        type=IssueType.PUNCTUATION,
        severity=_WARNING,
        category=RuleCategory.PUNCTUATION,
        suggestion=lambda match, context: match.group(0) + " ",
    ),
    Rule(
        id="punct-013",
        pattern=r"\([ \t]+",
        message="Remove the space after the opening parenthesis.",
        type=IssueType.PUNCTUATION,
        severity=_ERROR,
        category=RuleCategory.PUNCTUATION,
        suggestion=_fixed("("),
    ),
    Rule(
        id="punct-014",
        pattern=r"[ \t]+\)",
        message="Remove the space before the closing parenthesis.",
        type=IssueType.PUNCTUATION,
        severity=_ERROR,
        category=RuleCategory.PUNCTUATION,
        suggestion=_fixed(")"),
    ),
    Rule(
        id="punct-015",
        pattern=r",{2,}",
        message="Repeated comma.",
        type=IssueType.PUNCTUATION,
        severity=_WARNING,
        category=RuleCategory.PUNCTUATION,
        suggestion=_fixed(","),
    ),
    Rule(
        id="punct-016",
        pattern=r"(?<!\.)\.\.(?!\.)",
        message="Repeated period.",
        type=IssueType.PUNCTUATION,
        severity=_WARNING,
        category=RuleCategory.PUNCTUATION,
        suggestion=_fixed("."),
    ),
    Rule(
        id="punct-017",
        pattern=r"(?<=\S)[ \t]{2,}(?=\S)",
        message="Multiple spaces between words.",
        type=IssueType.PUNCTUATION,
        severity=_WARNING,
        category=RuleCategory.PUNCTUATION,
        suggestion=_fixed(" "),
    ),
)


# ---------------------------------------------------------------------------
# Wordiness
# ---------------------------------------------------------------------------

_REDUNDANT_PHRASES = {
    "absolutely essential": "essential",
    "absolutely necessary": "necessary",
    "advance planning": "planning",
    "added bonus": "bonus",
    "basic fundamentals": "fundamentals",
    "close proximity": "proximity",
    "completely eliminate": "eliminate",
    "each and every": "each",
    "end result": "result",
    "final outcome": "outcome",
    "future plans": "plans",
    "past history": "history",
    "past experience": "experience",
    "new innovation": "innovation",
    "true fact": "fact",
    "unexpected surprise": "surprise",
    "joint collaboration": "collaboration",
    "repeat again": "repeat",
    "revert back": "revert",
    "reason why": "reason",
}

_WORDY_PHRASES = {
    "due to the fact that": ("because", "since"),
    "owing to the fact that": ("because",),
    "in spite of the fact that": ("although",),
    "despite the fact that": ("although",),
    "in order to": ("to",),
    "for the purpose of": ("to", "for"),
    "in the event that": ("if",),
    "at this point in time": ("now", "currently"),
    "at the present time": ("now", "currently"),
    "in the near future": ("soon",),
    "a large number of": ("many",),
    "a majority of": ("most",),
    "the majority of": ("most",),
    "has the ability to": ("can",),
    "has the capacity to": ("can",),
    "is able to": ("can",),
    "with regard to": ("regarding", "about"),
    "with respect to": ("regarding", "about"),
    "in relation to": ("regarding", "about"),
    "in terms of": ("regarding",),
    "on the basis of": ("based on",),
    "prior to": ("before",),
    "subsequent to": ("after",),
    "in close proximity to": ("near",),
    "it is important to note that": ("notably",),
    "it should be noted that": ("notably",),
    "it is interesting to note that": ("interestingly",),
}

_NOMINALISATIONS = {
    "make a decision": "decide",
    "make an assumption": "assume",
    "make a comparison": "compare",
    "conduct an investigation": "investigate",
    "conduct an analysis": "analyse",
    "perform an analysis": "analyse",
    "give consideration to": "consider",
    "provide an explanation": "explain",
    "reach a conclusion": "conclude",
    "take into consideration": "consider",
    "have an effect on": "affect",
    "is dependent on": "depends on",
    "is indicative of": "indicates",
}

_VERBOSE_WORDS = {
    "utilize": "use",
    "utilise": "use",
    "utilizes": "uses",
    "utilises": "uses",
    "utilized": "used",
    "utilised": "used",
    "utilization": "use",
    "utilisation": "use",
    "commence": "begin",
    "commenced": "began",
    "endeavour": "try",
    "endeavor": "try",
    "facilitate": "help",
    "ascertain": "determine",
}


WORDINESS_RULES: tuple[Rule, ...] = (
    Rule(
        id="word-001",
        pattern=rf"\b({_alternation(_REDUNDANT_PHRASES)})\b",
        message='Redundant phrase: "{1}".',
        type=IssueType.STYLE,
        severity=_WARNING,
        category=RuleCategory.WORDINESS,
        suggestion=_lookup(_REDUNDANT_PHRASES),
    ),
    Rule(
        id="word-002",
        pattern=rf"\b({_alternation(_WORDY_PHRASES)})\b",
        message='Wordy phrase: "{1}".',
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.WORDINESS,
        suggestion=_lookup(_WORDY_PHRASES),
    ),
    Rule(
        id="word-003",
        pattern=rf"\b({_alternation(_NOMINALISATIONS)})\b",
        message='Nominalisation: "{1}" can be a single verb.',
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.WORDINESS,
        suggestion=_lookup(_NOMINALISATIONS),
    ),
    Rule(
        id="word-004",
        pattern=rf"\b({_alternation(_VERBOSE_WORDS)})\b",
        message='Prefer the plainer word for "{1}".',
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.WORDINESS,
        suggestion=_lookup(_VERBOSE_WORDS),
    ),
    Rule(
        id="word-005",
        pattern=r"\bthere\s+(?:is|are|were|was)\s+(?:a|an|many|several|some)?\s*\w+\s+(?:that|who|which)\b",
        message="Expletive construction; consider starting with the subject.",
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.WORDINESS,
    ),
    Rule(
        id="word-006",
        pattern=r"\b(?:the\s+)?(?:fact|question)\s+(?:of\s+)?whether\s+or\s+not\b",
        message='"whether or not" can usually be "whether".',
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.WORDINESS,
    ),
    Rule(
        id="word-015",
        pattern=r"\b(?:is|are|was|were|be|been|being)\s+\w+ed\b",
        message="Passive voice; consider an active construction.",
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.WORDINESS,
    ),
    Rule(
        id="word-016",
        pattern=r"\b(?:it\s+was\s+(?:found|shown|observed|determined)\s+that)\b",
        message="Impersonal passive; consider naming who found it.",
        type=IssueType.STYLE,
        severity=_INFO,
        category=RuleCategory.WORDINESS,
    ),
)


# ---------------------------------------------------------------------------
# Spelling
# ---------------------------------------------------------------------------

COMMON_MISSPELLINGS = {
    "accomodate": "accommodate",
    "acheive": "achieve",
    "acheived": "achieved",
    "aquire": "acquire",
    "analysys": "analysis",
    "arguement": "argument",
    "arguements": "arguments",
    "begining": "beginning",
    "beleive": "believe",
    "calender": "calendar",
    "collegue": "colleague",
    "comparision": "comparison",
    "concious": "conscious",
    "consistant": "consistent",
    "critisism": "criticism",
    "definately": "definitely",
    "embarass": "embarrass",
    "enviroment": "environment",
    "existance": "existence",
    "experiement": "experiment",
    "foriegn": "foreign",
    "goverment": "government",
    "grammer": "grammar",
    "happend": "happened",
    "hypotheis": "hypothesis",
    "immediatly": "immediately",
    "independant": "independent",
    "liason": "liaison",
    "methodolgy": "methodology",
    "millenium": "millennium",
    "neccessary": "necessary",
    "noticable": "noticeable",
    "occassion": "occasion",
    "occurance": "occurrence",
    "occured": "occurred",
    "occurence": "occurrence",
    "occuring": "occurring",
    "paramter": "parameter",
    "paramters": "parameters",
    "particpant": "participant",
    "particpants": "participants",
    "persue": "pursue",
    "posession": "possession",
    "prefered": "preferred",
    "publically": "publicly",
    "questionaire": "questionnaire",
    "questionaires": "questionnaires",
    "recieve": "receive",
    "recieved": "received",
    "recieving": "receiving",
    "recomend": "recommend",
    "refered": "referred",
    "relevent": "relevant",
    "reseach": "research",
    "reserach": "research",
    "sentance": "sentence",
    "sentances": "sentences",
    "seperate": "separate",
    "seperately": "separately",
    "signifcant": "significant",
    "signficant": "significant",
    "succesful": "successful",
    "succesfully": "successfully",
    "supercede": "supersede",
    "teh": "the",
    "thier": "their",
    "truely": "truly",
    "untill": "until",
    "wich": "which",
    "wierd": "weird",
    "writting": "writing",
}

# British -> American spellings, one table per rule.
_OUR_STEMS = "col|fav|behavi|hon|lab|flav|hum|neighb|rum|vig"
_ISE_STEMS = (
    "organ|real|recogn|emphas|summar|critic|minim|maxim|priorit|categor|character|general"
    "|hypothes|optim|standard|visual|normal|random|conceptual|operational|author"
)
_MISC_BRITISH = {
    "programme": "program",
    "programmes": "programs",
    "catalogue": "catalog",
    "analogue": "analog",
    "grey": "gray",
    "ageing": "aging",
    "modelling": "modeling",
    "modelled": "modeled",
    "travelled": "traveled",
    "labelled": "labeled",
    "cancelled": "canceled",
    "fulfil": "fulfill",
    "enrol": "enroll",
    "whilst": "while",
    "amongst": "among",
}
_CE_NOUNS = {"defence": "defense", "licence": "license", "offence": "offense", "pretence": "pretense"}


def _british_to_american(old: str, new: str) -> SuggestionFn:
    def _suggest(match: "re.Match[str]", context: RuleContext | None) -> str:
        word = match.group(0)
        index = word.lower().rfind(old)
        replacement = new.upper() if word[index : index + len(old)].isupper() else new
        return word[:index] + replacement + word[index + len(old) :]

    return _suggest


SPELLING_RULES: tuple[Rule, ...] = (
    Rule(
        id="spell-001",
        pattern=rf"\b({'|'.join(_LATIN_SINGULARS)})\s+(are|were|have)\b",
        message='"{1}" is singular; use its plural form or a singular verb.',
        type=IssueType.SPELLING,
        severity=_ERROR,
        category=RuleCategory.SPELLING,
        suggestion=_latin_singular_options,
    ),
    Rule(
        id="spell-011",
        pattern=rf"\b({_alternation(COMMON_MISSPELLINGS)})\b",
        message='Possible misspelling: "{1}".',
        type=IssueType.SPELLING,
        severity=_ERROR,
        category=RuleCategory.SPELLING,
        suggestion=_lookup(COMMON_MISSPELLINGS),
    ),
    Rule(
        id="spell-016",
        pattern=rf"\b(?:{_OUR_STEMS})our(?:s|ed|ing|ite|ites|al|ally)?\b",
        message='British spelling "{match}"; American English uses "-or".',
        type=IssueType.SPELLING,
        severity=_INFO,
        category=RuleCategory.SPELLING,
        suggestion=_british_to_american("our", "or"),
    ),
    Rule(
        id="spell-017",
        pattern=r"\b(?:anal|paral|catal|dial)ys(?:e|ed|ing)\b",
        message='British spelling "{match}"; American English uses "-yze".',
        type=IssueType.SPELLING,
        severity=_INFO,
        category=RuleCategory.SPELLING,
        suggestion=_british_to_american("ys", "yz"),
    ),
    Rule(
        id="spell-018",
        pattern=rf"\b(?:\w{{3,}}isations?|(?:{_ISE_STEMS})is(?:e|es|ed|ing))\b",
        message='British spelling "{match}"; American English uses "-ize".',
        type=IssueType.SPELLING,
        severity=_INFO,
        category=RuleCategory.SPELLING,
        suggestion=_british_to_american("is", "iz"),
    ),
    Rule(
        id="spell-019",
        pattern=r"\b(?:cent|met|lit|fib|theat|calib)re(?:s|d)?\b",
        message='British spelling "{match}"; American English uses "-er".',
        type=IssueType.SPELLING,
        severity=_INFO,
        category=RuleCategory.SPELLING,
        suggestion=_british_to_american("re", "er"),
    ),
    Rule(
        id="spell-020",
        pattern=rf"\b({_alternation(_CE_NOUNS)})\b",
        message='British spelling "{1}"; American English uses "-se".',
        type=IssueType.SPELLING,
        severity=_INFO,
        category=RuleCategory.SPELLING,
        suggestion=_lookup(_CE_NOUNS),
    ),
    Rule(
        id="spell-021",
        pattern=rf"\b({_alternation(_MISC_BRITISH)})\b",
        message='British spelling "{1}".',
        type=IssueType.SPELLING,
        severity=_INFO,
        category=RuleCategory.SPELLING,
        suggestion=_lookup(_MISC_BRITISH),
    ),
)


RULES_BY_CATEGORY: dict[RuleCategory, tuple[Rule, ...]] = {
    RuleCategory.GRAMMAR: GRAMMAR_RULES,
    RuleCategory.ACADEMIC_TONE: TONE_RULES,
    RuleCategory.CITATION: CITATION_RULES,
    RuleCategory.PUNCTUATION: PUNCTUATION_RULES,
    RuleCategory.WORDINESS: WORDINESS_RULES,
    RuleCategory.SPELLING: SPELLING_RULES,
}

ALL_RULES: tuple[Rule, ...] = tuple(rule for group in RULES_BY_CATEGORY.values() for rule in group)


def rules_by_type(issue_type: IssueType | str) -> list[Rule]:
    wanted = IssueType(issue_type)
    return [rule for rule in ALL_RULES if rule.type is wanted]


def rules_by_severity(severity: Severity | str) -> list[Rule]:
    wanted = Severity(severity)
    return [rule for rule in ALL_RULES if rule.severity is wanted]


def get_rule(rule_id: str) -> Rule:
    for rule in ALL_RULES:
        if rule.id == rule_id:
            return rule
    raise KeyError(rule_id)
