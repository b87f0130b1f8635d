"""Issues reported by the meta description rule."""

from enum import Enum

from ..models import IssueSeverity
from .catalog import IssueCatalog, IssueDefinition


class MetaDescriptionIssueId(str, Enum):
    NO_META_DESCRIPTION = "NO_META_DESCRIPTION"
    TOO_SHORT = "TOO_SHORT"
    TOO_LONG = "TOO_LONG"
    KEYWORD_STUFFING = "KEYWORD_STUFFING"
    LACKS_COMPELLING = "LACKS_COMPELLING"
    DUPLICATES_TITLE = "DUPLICATES_TITLE"
    DUPLICATES_H1 = "DUPLICATES_H1"


META_DESCRIPTION_ISSUES = IssueCatalog("meta_description", {
    MetaDescriptionIssueId.NO_META_DESCRIPTION: IssueDefinition(
        severity=IssueSeverity.CRITICAL,
        description="Page has no meta description",
        recommendation="Add a meta description of 120-160 characters summarizing the page",
    ),
    MetaDescriptionIssueId.TOO_SHORT: IssueDefinition(
        severity=IssueSeverity.HIGH,
        description="Meta description is too short",
        recommendation="Expand the meta description to 120-160 characters",
    ),
    MetaDescriptionIssueId.TOO_LONG: IssueDefinition(
        severity=IssueSeverity.MEDIUM,
        description="Meta description is too long and will be truncated",
        recommendation="Shorten the meta description to 120-160 characters",
    ),
    MetaDescriptionIssueId.KEYWORD_STUFFING: IssueDefinition(
        severity=IssueSeverity.MEDIUM,
        description="Meta description repeats keywords",
        recommendation="Write the description as a natural sentence and mention each keyword once",
    ),
    MetaDescriptionIssueId.LACKS_COMPELLING: IssueDefinition(
        severity=IssueSeverity.LOW,
        description="Meta description lacks compelling, action-oriented language",
        recommendation="Add action words such as learn, discover or compare",
    ),
    MetaDescriptionIssueId.DUPLICATES_TITLE: IssueDefinition(
        severity=IssueSeverity.HIGH,
        description="Meta description duplicates the title tag",
        recommendation="Write a description that adds information beyond the title",
    ),
    MetaDescriptionIssueId.DUPLICATES_H1: IssueDefinition(
        severity=IssueSeverity.MEDIUM,
        description="Meta description duplicates the H1 heading",
        recommendation="Write a description that summarizes the page rather than repeating the H1",
    ),
})


create_meta_description_issue = META_DESCRIPTION_ISSUES.create
