"""Read-only issue catalog and the issue factory."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Optional

from ..models import IssueSeverity, RuleIssue


@dataclass(frozen=True)
class IssueDefinition:
    """Catalog entry for one failure mode a rule can report."""
    severity: IssueSeverity
    description: str
    recommendation: str


class IssueCatalog(Mapping):
    """Immutable lookup from issue id to its definition.

    Catalogs are built once at import time and only ever read, so a single
    instance can be shared by any number of concurrent evaluations.
    """

    def __init__(self, name: str, entries: Mapping[Enum, IssueDefinition]):
        self.name = name
        self._entries = MappingProxyType(dict(entries))

    def __getitem__(self, issue_id: Enum) -> IssueDefinition:
        return self._entries[issue_id]

    def __iter__(self) -> Iterator[Enum]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"IssueCatalog({self.name!r}, {len(self)} entries)"

    @property
    def ids(self) -> set[str]:
        return {issue_id.value for issue_id in self._entries}

    def create(
        self,
        issue_id: Enum,
        affected_elements: Optional[Iterable[str]] = None,
        description: Optional[str] = None,
    ) -> RuleIssue:
        """Instantiate an issue from its catalog entry.

        Args:
            issue_id: Key of the catalog entry. Unknown ids raise ``KeyError``.
            affected_elements: Offending URL, fragment, text... passed through as is.
            description: Replaces the catalog description when given.
        """
        try:
            definition = self._entries[issue_id]
        except KeyError:
            raise KeyError(f"{issue_id!r} is not in the {self.name} issue catalog") from None

        return RuleIssue(
            id=issue_id.value,
            severity=definition.severity,
            description=description or definition.description,
            recommendation=definition.recommendation,
            affected_elements=tuple(affected_elements or ()),
        )
