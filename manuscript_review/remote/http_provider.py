"""Shared HTTP plumbing for remote grammar providers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import requests
from dotenv import load_dotenv

from .provider import (
    ProviderConfigurationError,
    RemoteParseError,
    TerminalProviderError,
    TransientProviderError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def load_provider_env(dotenv_path: str | Path | None = None) -> None:
    """Load API keys and URLs from a .env file into the environment."""

    if dotenv_path is not None:
        load_dotenv(dotenv_path=Path(dotenv_path))
    else:
        load_dotenv()


class HttpGrammarProvider:
    """Base class: POST a request and map failures onto the provider error taxonomy.

    Subclasses set ``name`` and implement ``check``; they call :meth:`post`
    with either form ``data`` or a ``json`` body.
    """

    name = "http"

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()

    def post(
        self,
        url: str,
        *,
        data: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Send the request and return the decoded JSON body."""

        logger.debug("%s: POST %s", self.name, url)
        try:
            response = self._session.post(
                url,
                data=data,
                json=json,
                headers=dict(headers or {}),
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise TransientProviderError(f"{self.name}: request timed out after {self.timeout}s") from exc
        except requests.ConnectionError as exc:
            raise TerminalProviderError(f"{self.name}: service unreachable: {exc}") from exc
        except requests.RequestException as exc:
            raise TerminalProviderError(f"{self.name}: request failed: {exc}") from exc

        status = response.status_code
        if status == 429 or status >= 500:
            raise TransientProviderError(f"{self.name}: HTTP {status}", status_code=status)
        if status in (401, 403):
            raise ProviderConfigurationError(
                f"{self.name}: authentication rejected (HTTP {status})", status_code=status
            )
        if status >= 400:
            raise TerminalProviderError(f"{self.name}: HTTP {status}", status_code=status)

        try:
            return response.json()
        except ValueError as exc:
            raise RemoteParseError(
                f"{self.name}: response is not valid JSON", response_text=response.text
            ) from exc

    def close(self) -> None:
        self._session.close()
