"""Issue catalogs shared by the rules."""

from .catalog import IssueCatalog, IssueDefinition
from .meta_description import (
    META_DESCRIPTION_ISSUES,
    MetaDescriptionIssueId,
    create_meta_description_issue,
)
from .url_structure import (
    URL_STRUCTURE_ISSUES,
    UrlStructureIssueId,
    create_url_structure_issue,
)

__all__ = [
    "IssueCatalog",
    "IssueDefinition",
    "META_DESCRIPTION_ISSUES",
    "MetaDescriptionIssueId",
    "create_meta_description_issue",
    "URL_STRUCTURE_ISSUES",
    "UrlStructureIssueId",
    "create_url_structure_issue",
]
