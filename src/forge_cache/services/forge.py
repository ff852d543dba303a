"""Read-through access to forge resources backed by the response cache."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from forge_cache.adapters.forge_client import ForgeClient
from forge_cache.domain.responses import (
    IssueResponse,
    Label,
    PullResponse,
    RepositorySummary,
    SearchIssueResponse,
    SearchRepoResponse,
)
from forge_cache.services.cache import Cache

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class ForgeService:
    """Service for forge lookups that consults the cache before the client."""

    client: ForgeClient
    cache: Cache
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def get_json(self, url: str) -> object:
        """Fetch an arbitrary URL payload with caching."""
        cached = self.cache.get_generic(url)
        if cached is not None:
            self._log_hit("generic", url)
            return cached

        payload = await self._call_with_retry(
            lambda: self.client.get_json(url), action=f"get_json:{url}"
        )
        self.cache.set_generic(url, payload)
        return payload

    async def get_issue(self, org: str, repo: str, number: int) -> IssueResponse:
        """Fetch an issue with caching."""
        cached = self.cache.get_issue(org, repo, number)
        if cached is not None:
            self._log_hit("issue", f"{org}/{repo}#{number}")
            return cached

        payload = await self._call_with_retry(
            lambda: self.client.get_issue(org, repo, number),
            action=f"get_issue:{org}/{repo}#{number}",
        )
        issue = _issue_from_payload(payload)
        self.cache.set_issue(org, repo, issue)
        return issue

    async def get_pull_request(self, org: str, repo: str, number: int) -> PullResponse:
        """Fetch a pull request with caching."""
        cached = self.cache.get_pull_request(org, repo, number)
        if cached is not None:
            self._log_hit("pull", f"{org}/{repo}#{number}")
            return cached

        payload = await self._call_with_retry(
            lambda: self.client.get_pull_request(org, repo, number),
            action=f"get_pull_request:{org}/{repo}#{number}",
        )
        pull = _pull_from_payload(payload)
        self.cache.set_pull_request(org, repo, pull)
        return pull

    async def search_issues(self, query: str) -> SearchIssueResponse:
        """Search issues with caching on the literal query."""
        cached = self.cache.get_issue_search(query)
        if cached is not None:
            self._log_hit("issue_search", query)
            return cached

        payload = await self._call_with_retry(
            lambda: self.client.search_issues(query), action="search_issues"
        )
        result = SearchIssueResponse(
            total_count=int(payload.get("total_count", 0)),
            incomplete_results=bool(payload.get("incomplete_results", False)),
            items=tuple(_issue_from_payload(item) for item in payload.get("items", [])),
        )
        self.cache.set_issue_search(query, result)
        if self.debug:
            _logger.info(
                "Forge issue search: query=%s results=%s", query, len(result.items)
            )
        return result

    async def search_repositories(self, query: str) -> SearchRepoResponse:
        """Search repositories with caching on the literal query."""
        cached = self.cache.get_repo_search(query)
        if cached is not None:
            self._log_hit("repo_search", query)
            return cached

        payload = await self._call_with_retry(
            lambda: self.client.search_repositories(query),
            action="search_repositories",
        )
        result = SearchRepoResponse(
            total_count=int(payload.get("total_count", 0)),
            incomplete_results=bool(payload.get("incomplete_results", False)),
            items=tuple(
                RepositorySummary(
                    full_name=str(item["full_name"]),
                    description=item.get("description"),
                    stargazers_count=int(item.get("stargazers_count", 0)),
                    html_url=item.get("html_url"),
                )
                for item in payload.get("items", [])
            ),
        )
        self.cache.set_repo_search(query, result)
        if self.debug:
            _logger.info(
                "Forge repo search: query=%s results=%s", query, len(result.items)
            )
        return result

    def _log_hit(self, namespace: str, key: str) -> None:
        if self.debug:
            _logger.info("Forge cache hit: namespace=%s key=%s", namespace, key)

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[object]]", *, action: str
    ) -> object:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                status_code = _status_code_from_exception(exc)
                if self.debug:
                    _logger.warning(
                        "Forge %s failed (attempt %s/%s, status=%s): %s",
                        action,
                        attempt,
                        self.retry_attempts + 1,
                        status_code,
                        exc,
                    )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _number(payload: dict[str, object]) -> int:
    """Per-repository number, which is also the cache key for the resource."""
    number = payload.get("number")
    if number is None:
        number = payload.get("id")
    return int(number)


def _issue_from_payload(payload: dict[str, object]) -> IssueResponse:
    return IssueResponse(
        id=_number(payload),
        title=str(payload.get("title", "")),
        state=str(payload.get("state", "")),
        body=payload.get("body"),
        html_url=payload.get("html_url"),
        labels=tuple(
            Label(name=str(label["name"]), color=label.get("color"))
            for label in payload.get("labels", [])
        ),
    )


def _pull_from_payload(payload: dict[str, object]) -> PullResponse:
    head = payload.get("head") or {}
    base = payload.get("base") or {}
    return PullResponse(
        id=_number(payload),
        title=str(payload.get("title", "")),
        state=str(payload.get("state", "")),
        head_ref=head.get("ref"),
        base_ref=base.get("ref"),
        merged=bool(payload.get("merged", False)),
        draft=bool(payload.get("draft", False)),
        html_url=payload.get("html_url"),
    )
