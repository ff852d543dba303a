"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from forge_cache.adapters.forge_client import ForgeClient
from forge_cache.config import Settings
from forge_cache.services.cache import InMemoryCache


@dataclass
class FakeClock:
    """Controllable clock returning a fixed UTC time."""

    now: datetime = field(default_factory=lambda: datetime(2024, 1, 1, tzinfo=UTC))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@dataclass
class FakeForgeClient(ForgeClient):
    """Fake forge client returning canned payloads and recording calls."""

    calls: list[tuple[str, ...]] = field(default_factory=list)
    failures: int = 0

    async def get_json(self, url: str) -> object:
        self._record("get_json", url)
        return {"url": url, "ok": True}

    async def get_issue(self, org: str, repo: str, number: int) -> dict[str, object]:
        self._record("get_issue", org, repo, str(number))
        return {
            "id": 900000 + number,
            "number": number,
            "title": "bug",
            "state": "open",
            "body": "Crashes on start",
            "html_url": f"https://forge.example/{org}/{repo}/issues/{number}",
            "labels": [{"name": "bug", "color": "d73a4a"}],
        }

    async def get_pull_request(
        self, org: str, repo: str, number: int
    ) -> dict[str, object]:
        self._record("get_pull_request", org, repo, str(number))
        return {
            "number": number,
            "title": "Fix crash",
            "state": "open",
            "head": {"ref": "fix-crash"},
            "base": {"ref": "main"},
            "merged": False,
            "draft": True,
        }

    async def search_issues(self, query: str) -> dict[str, object]:
        self._record("search_issues", query)
        return {
            "total_count": 1,
            "incomplete_results": False,
            "items": [{"number": 7, "title": "flaky test", "state": "closed"}],
        }

    async def search_repositories(self, query: str) -> dict[str, object]:
        self._record("search_repositories", query)
        return {
            "total_count": 1,
            "incomplete_results": False,
            "items": [
                {
                    "full_name": "acme/widgets",
                    "description": "Widgets",
                    "stargazers_count": 120,
                }
            ],
        }

    def _record(self, *call: str) -> None:
        self.calls.append(call)
        if self.failures:
            self.failures -= 1
            raise RuntimeError("forge unavailable")


@pytest.fixture
def settings() -> Settings:
    return Settings(cache_ttl_minutes=20, debug=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryCache:
    return InMemoryCache(clock=clock)


@pytest.fixture
def forge_client() -> FakeForgeClient:
    return FakeForgeClient()
