"""Source-forge response models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Label:
    """Issue or pull request label."""

    name: str
    color: str | None = None


@dataclass(frozen=True)
class IssueResponse:
    """Issue as returned by the forge API."""

    id: int
    title: str
    state: str
    body: str | None = None
    html_url: str | None = None
    labels: tuple[Label, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PullResponse:
    """Pull request as returned by the forge API."""

    id: int
    title: str
    state: str
    head_ref: str | None = None
    base_ref: str | None = None
    merged: bool = False
    draft: bool = False
    html_url: str | None = None


@dataclass(frozen=True)
class RepositorySummary:
    """Repository entry in a search result."""

    full_name: str
    description: str | None
    stargazers_count: int
    html_url: str | None = None


@dataclass(frozen=True)
class SearchIssueResponse:
    """Result page of an issue search."""

    total_count: int
    incomplete_results: bool
    items: tuple[IssueResponse, ...]


@dataclass(frozen=True)
class SearchRepoResponse:
    """Result page of a repository search."""

    total_count: int
    incomplete_results: bool
    items: tuple[RepositorySummary, ...]
