"""In-memory cache for source-forge API responses."""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Generic, Protocol, TypeVar

from forge_cache.domain.responses import (
    IssueResponse,
    PullResponse,
    SearchIssueResponse,
    SearchRepoResponse,
)

DEFAULT_TTL_MINUTES = 20

T = TypeVar("T")
K = TypeVar("K")

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class Identified(Protocol):
    """Payload exposing the numeric id used as its cache key."""

    id: int


class Cache(Protocol):
    """Cache interface for forge responses, one namespace per resource kind."""

    def get_generic(self, url: str) -> object | None:
        """Return the payload cached for a URL if present and fresh."""

    def set_generic(self, url: str, value: object) -> None:
        """Store a payload for a URL."""

    def get_issue(self, org: str, repo: str, number: int) -> IssueResponse | None:
        """Return a cached issue if present and fresh."""

    def set_issue(self, org: str, repo: str, issue: IssueResponse) -> None:
        """Store an issue under its own id."""

    def get_pull_request(
        self, org: str, repo: str, number: int
    ) -> PullResponse | None:
        """Return a cached pull request if present and fresh."""

    def set_pull_request(self, org: str, repo: str, pull: PullResponse) -> None:
        """Store a pull request under its own id."""

    def get_issue_search(self, query: str) -> SearchIssueResponse | None:
        """Return a cached issue search result if present and fresh."""

    def set_issue_search(self, query: str, result: SearchIssueResponse) -> None:
        """Store an issue search result."""

    def get_repo_search(self, query: str) -> SearchRepoResponse | None:
        """Return a cached repository search result if present and fresh."""

    def set_repo_search(self, query: str, result: SearchRepoResponse) -> None:
        """Store a repository search result."""


@dataclass
class CacheEntry(Generic[T]):
    """Cached value with its creation time and lifetime in minutes."""

    value: T
    created: datetime = field(default_factory=_utcnow)
    ttl_minutes: int = DEFAULT_TTL_MINUTES

    def is_expired(self, now: datetime) -> bool:
        """Return True once ``now`` is past the entry's lifetime."""
        return now > self.created + timedelta(minutes=self.ttl_minutes)

    @property
    def expired(self) -> bool:
        return self.is_expired(_utcnow())


@dataclass
class RepoCache:
    """Issues and pull requests of one repository, keyed by number."""

    issues: dict[int, CacheEntry[IssueResponse]] = field(default_factory=dict)
    pulls: dict[int, CacheEntry[PullResponse]] = field(default_factory=dict)


@dataclass
class OrgCache:
    """Repository caches of one organization."""

    repos: dict[str, RepoCache] = field(default_factory=dict)


@dataclass
class QueryCache:
    """Search results keyed by the literal query string."""

    issues: dict[str, CacheEntry[SearchIssueResponse]] = field(default_factory=dict)
    repos: dict[str, CacheEntry[SearchRepoResponse]] = field(default_factory=dict)


@dataclass(frozen=True)
class CacheStats:
    """Number of resident entries per namespace, expired ones included."""

    generic: int
    issues: int
    pulls: int
    issue_searches: int
    repo_searches: int

    @property
    def total(self) -> int:
        return (
            self.generic
            + self.issues
            + self.pulls
            + self.issue_searches
            + self.repo_searches
        )


@dataclass
class InMemoryCache(Cache):
    """Process-local cache with lazy expiry.

    Entries are never evicted. An expired entry stays resident and is skipped
    on read until a later ``set`` refreshes it in place.
    """

    default_ttl_minutes: int = DEFAULT_TTL_MINUTES
    clock: Callable[[], datetime] = _utcnow
    generic: dict[str, CacheEntry[object]] = field(default_factory=dict)
    orgs: dict[str, OrgCache] = field(default_factory=dict)
    queries: QueryCache = field(default_factory=QueryCache)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def get_generic(self, url: str) -> object | None:
        """Return the payload cached for a URL if it hasn't expired."""
        with self._lock:
            return self._read(self.generic.get(url))

    def set_generic(
        self, url: str, value: object, *, ttl_minutes: int | None = None
    ) -> None:
        """Store a payload for a URL."""
        with self._lock:
            self._write(self.generic, url, value, ttl_minutes)

    def get_issue(self, org: str, repo: str, number: int) -> IssueResponse | None:
        """Return a cached issue if it hasn't expired."""
        with self._lock:
            return self._read(self._repo_cache(org, repo).issues.get(number))

    def set_issue(
        self,
        org: str,
        repo: str,
        issue: IssueResponse,
        *,
        ttl_minutes: int | None = None,
    ) -> None:
        """Store an issue keyed by its own id."""
        with self._lock:
            issues = self._repo_cache(org, repo).issues
            self._write(issues, _identifier(issue), issue, ttl_minutes)

    def get_pull_request(
        self, org: str, repo: str, number: int
    ) -> PullResponse | None:
        """Return a cached pull request if it hasn't expired."""
        with self._lock:
            return self._read(self._repo_cache(org, repo).pulls.get(number))

    def set_pull_request(
        self,
        org: str,
        repo: str,
        pull: PullResponse,
        *,
        ttl_minutes: int | None = None,
    ) -> None:
        """Store a pull request keyed by its own id."""
        with self._lock:
            pulls = self._repo_cache(org, repo).pulls
            self._write(pulls, _identifier(pull), pull, ttl_minutes)

    def get_issue_search(self, query: str) -> SearchIssueResponse | None:
        """Return a cached issue search result if it hasn't expired."""
        with self._lock:
            return self._read(self.queries.issues.get(query))

    def set_issue_search(
        self,
        query: str,
        result: SearchIssueResponse,
        *,
        ttl_minutes: int | None = None,
    ) -> None:
        """Store an issue search result under the unnormalized query."""
        with self._lock:
            self._write(self.queries.issues, query, result, ttl_minutes)

    def get_repo_search(self, query: str) -> SearchRepoResponse | None:
        """Return a cached repository search result if it hasn't expired."""
        with self._lock:
            return self._read(self.queries.repos.get(query))

    def set_repo_search(
        self,
        query: str,
        result: SearchRepoResponse,
        *,
        ttl_minutes: int | None = None,
    ) -> None:
        """Store a repository search result under the unnormalized query."""
        with self._lock:
            self._write(self.queries.repos, query, result, ttl_minutes)

    def stats(self) -> CacheStats:
        """Count resident entries per namespace."""
        with self._lock:
            repos = [repo for org in self.orgs.values() for repo in org.repos.values()]
            return CacheStats(
                generic=len(self.generic),
                issues=sum(len(repo.issues) for repo in repos),
                pulls=sum(len(repo.pulls) for repo in repos),
                issue_searches=len(self.queries.issues),
                repo_searches=len(self.queries.repos),
            )

    def _repo_cache(self, org: str, repo: str) -> RepoCache:
        """Return the cache for an org/repo pair, creating it on first use.

        Must be called with ``_lock`` held.
        """
        org_cache = self.orgs.get(org)
        if org_cache is None:
            org_cache = self.orgs[org] = OrgCache()
        repo_cache = org_cache.repos.get(repo)
        if repo_cache is None:
            repo_cache = org_cache.repos[repo] = RepoCache()
        return repo_cache

    def _read(self, entry: CacheEntry[T] | None) -> T | None:
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            _logger.debug("Cache entry expired: created=%s", entry.created)
            return None
        return entry.value

    def _write(
        self,
        entries: dict[K, CacheEntry[T]],
        key: K,
        value: T,
        ttl_minutes: int | None,
    ) -> None:
        """Insert a new entry or refresh the existing one in place."""
        now = self.clock()
        entry = entries.get(key)
        if entry is None:
            entries[key] = CacheEntry(
                value=value,
                created=now,
                ttl_minutes=(
                    ttl_minutes
                    if ttl_minutes is not None
                    else self.default_ttl_minutes
                ),
            )
            return
        entry.value = value
        entry.created = now


def _identifier(payload: Identified) -> int:
    return payload.id
