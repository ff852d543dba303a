"""Source-forge API client interface."""

from typing import Protocol


class ForgeClient(Protocol):
    """Interface for the HTTP collaborator that talks to the forge API."""

    async def get_json(self, url: str) -> object:
        """Fetch an arbitrary URL and return the decoded JSON body."""

    async def get_issue(self, org: str, repo: str, number: int) -> dict[str, object]:
        """Fetch an issue and return raw API data."""

    async def get_pull_request(
        self, org: str, repo: str, number: int
    ) -> dict[str, object]:
        """Fetch a pull request and return raw API data."""

    async def search_issues(self, query: str) -> dict[str, object]:
        """Search issues and return raw API data."""

    async def search_repositories(self, query: str) -> dict[str, object]:
        """Search repositories and return raw API data."""
