"""Remote import source for dealer listings."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

import aiohttp
import pydantic

from autolot._constants import USER_AGENT
from autolot.config import AutolotConfig
from autolot.exceptions import AutolotConfigError, SourceUnavailableError
from autolot.models._base import AutolotBaseModel
from autolot.models.candidate import ImportCandidate

_logger = logging.getLogger(__name__)


class SourceFilter(AutolotBaseModel):
    """What the import source should read and which listings to return."""

    url: str
    make: str | None = None
    condition: str | None = None


class ImportSource(Protocol):
    """Structural interface for anything that can propose import candidates.

    The catalog never scrapes on its own; a concrete source (HTTP service,
    file, test double) is injected where candidates are needed.
    """

    async def fetch_candidates(self, source_filter: SourceFilter) -> list[ImportCandidate]:
        ...


def parse_candidates(items: Any, *, source: str = "unknown") -> list[ImportCandidate]:
    """Validate a list of raw listing dicts, dropping the ones that do not parse."""
    if not isinstance(items, list):
        raise ValueError("expected a list of vehicles")
    candidates: list[ImportCandidate] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            _logger.warning("Ignoring non-object listing at position %d", index)
            continue
        try:
            candidates.append(ImportCandidate.model_validate({"source": source, **item}))
        except pydantic.ValidationError as exc:
            _logger.warning("Ignoring invalid listing at position %d: %s", index, exc.errors()[0].get("msg"))
    return candidates


class HttpImportSource:
    """Import source backed by a JSON scraping service.

    Sends ``{"url": ..., "filters": {...}}`` and expects
    ``{"vehicles": [...]}`` back. Each attempt is bounded by
    ``config.import_timeout``; failed attempts are retried
    ``config.import_retries`` times before giving up.
    """

    def __init__(self, config: AutolotConfig, http_session: aiohttp.ClientSession) -> None:
        if not config.import_endpoint:
            raise AutolotConfigError("import_endpoint is not configured")
        self._config = config
        self._endpoint = config.import_endpoint
        self._http = http_session

    async def _post_once(self, body: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "accept": "application/json",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        _logger.debug("POST %s", self._endpoint)
        try:
            async with asyncio.timeout(self._config.import_timeout):
                async with self._http.post(self._endpoint, data=json.dumps(body), headers=headers) as resp:
                    text = await resp.text()
                    if resp.status != 200:
                        raise SourceUnavailableError(
                            f"HTTP {resp.status} from import source: {text[:200]}",
                            endpoint=self._endpoint,
                            status_code=resp.status,
                        )
        except SourceUnavailableError:
            raise
        except TimeoutError as exc:
            raise SourceUnavailableError(
                f"Import source timed out after {self._config.import_timeout}s",
                endpoint=self._endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise SourceUnavailableError(
                f"Request to import source failed: {exc}",
                endpoint=self._endpoint,
            ) from exc

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SourceUnavailableError(
                f"Invalid JSON from import source: {text[:200]}",
                endpoint=self._endpoint,
            ) from exc
        if not isinstance(payload, dict):
            raise SourceUnavailableError("Import source returned a non-object payload", endpoint=self._endpoint)
        return payload

    async def fetch_candidates(self, source_filter: SourceFilter) -> list[ImportCandidate]:
        body = {
            "url": source_filter.url,
            "filters": source_filter.model_dump(exclude={"url"}, exclude_none=True),
        }
        attempts = self._config.import_retries + 1
        last_error: SourceUnavailableError | None = None
        for attempt in range(1, attempts + 1):
            try:
                payload = await self._post_once(body)
                break
            except SourceUnavailableError as exc:
                last_error = exc
                if attempt < attempts:
                    _logger.warning("Import source attempt %d/%d failed: %s; retrying", attempt, attempts, exc)
        else:
            assert last_error is not None
            raise last_error

        try:
            candidates = parse_candidates(payload.get("vehicles", []), source=self._endpoint)
        except ValueError as exc:
            raise SourceUnavailableError(
                f"Malformed vehicles list from import source: {exc}",
                endpoint=self._endpoint,
            ) from exc
        _logger.info("Import source returned %d candidates", len(candidates))
        return candidates
