"""
AppQuery domain entity: the criteria used to locate an application.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Union

from packaging.specifiers import SpecifierSet
from packaging.version import Version

from process_foundry.entities.version import parse_requirement


def _as_tuple(values: Optional[Iterable[str]]) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(str(v) for v in values)


@dataclass(frozen=True)
class AppQuery:
    """
    Search criteria for an application.

    Attributes:
        name: Name to match, case-insensitively
        works_with: Optional version requirement the match must satisfy
        aliases: Alternate names that are also matched
        search_paths: Hints on where to look (directories, for CLI probing)
        find_all: Return every match instead of requiring exactly one
    """

    name: str
    works_with: Optional[Union[SpecifierSet, str]] = None
    aliases: tuple[str, ...] = field(default_factory=tuple)
    search_paths: tuple[str, ...] = field(default_factory=tuple)
    find_all: bool = False

    def __post_init__(self):
        if not self.name or not str(self.name).strip():
            raise ValueError("AppQuery requires a non-empty 'name'")
        object.__setattr__(self, "name", str(self.name).strip())
        if isinstance(self.works_with, str):
            object.__setattr__(
                self,
                "works_with",
                parse_requirement(self.works_with, f"Query for {self.name}"),
            )
        object.__setattr__(self, "aliases", _as_tuple(self.aliases))
        object.__setattr__(self, "search_paths", _as_tuple(self.search_paths))

    def with_find_all(self) -> "AppQuery":
        """Return a copy of this query that asks for every match."""
        return replace(self, find_all=True)

    def names(self) -> tuple[str, ...]:
        """The name followed by its aliases, without duplicates."""
        seen: list[str] = []
        for candidate in (self.name, *self.aliases):
            if candidate.lower() not in (s.lower() for s in seen):
                seen.append(candidate)
        return tuple(seen)

    def matches_name(self, name: str) -> bool:
        key = (name or "").strip().lower()
        return any(key == candidate.lower() for candidate in self.names())

    def accepts_version(self, version: Optional[Version]) -> bool:
        """
        Check a discovered version against works_with.

        Unknown versions are accepted; narrowing further is up to the caller.
        """
        if self.works_with is None or version is None:
            return True
        return self.works_with.contains(version, prereleases=True)

    def __str__(self) -> str:
        parts = [f"name='{self.name}'"]
        if self.works_with is not None:
            parts.append(f"works_with='{self.works_with}'")
        if self.aliases:
            parts.append(f"aliases={list(self.aliases)}")
        if self.find_all:
            parts.append("find_all=True")
        return f"AppQuery({', '.join(parts)})"


@dataclass(frozen=True)
class AppDescription:
    """General information about the external tool an adapter handles."""

    name: str
    handles_versions: Optional[Union[SpecifierSet, str]] = None
    aliases: tuple[str, ...] = field(default_factory=tuple)
    search_paths: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if isinstance(self.handles_versions, str):
            object.__setattr__(
                self,
                "handles_versions",
                parse_requirement(self.handles_versions, self.name),
            )
        object.__setattr__(self, "aliases", _as_tuple(self.aliases))
        object.__setattr__(self, "search_paths", _as_tuple(self.search_paths))

    def to_app_query(self) -> AppQuery:
        """Build a query that finds installed copies of this tool."""
        return AppQuery(
            name=self.name,
            works_with=self.handles_versions,
            aliases=self.aliases,
            search_paths=self.search_paths,
        )
