"""Issues reported by the URL structure rules."""

from enum import Enum

from ..models import IssueSeverity
from .catalog import IssueCatalog, IssueDefinition


class UrlStructureIssueId(str, Enum):
    URL_TOO_LONG = "URL_TOO_LONG"
    URL_LENGTHY = "URL_LENGTHY"
    NO_HTTPS = "NO_HTTPS"
    NOT_DESCRIPTIVE = "NOT_DESCRIPTIVE"
    UNENCODED_SPACES = "UNENCODED_SPACES"
    USES_UNDERSCORES = "USES_UNDERSCORES"
    CONTAINS_UPPERCASE = "CONTAINS_UPPERCASE"
    SPECIAL_CHARACTERS = "SPECIAL_CHARACTERS"
    DOUBLE_SLASHES = "DOUBLE_SLASHES"
    KEYWORD_STUFFING = "KEYWORD_STUFFING"
    GENERIC_TERMS = "GENERIC_TERMS"
    HIERARCHY_TOO_DEEP = "HIERARCHY_TOO_DEEP"
    ILLOGICAL_HIERARCHY = "ILLOGICAL_HIERARCHY"
    TOO_MANY_PARAMETERS = "TOO_MANY_PARAMETERS"
    HAS_FILE_EXTENSION = "HAS_FILE_EXTENSION"


URL_STRUCTURE_ISSUES = IssueCatalog("url_structure", {
    UrlStructureIssueId.URL_TOO_LONG: IssueDefinition(
        severity=IssueSeverity.HIGH,
        description="URL is longer than 200 characters",
        recommendation="Shorten the URL to under 100 characters by removing stop words and redundant segments",
    ),
    UrlStructureIssueId.URL_LENGTHY: IssueDefinition(
        severity=IssueSeverity.MEDIUM,
        description="URL is longer than 100 characters",
        recommendation="Consider shortening the URL to under 100 characters",
    ),
    UrlStructureIssueId.NO_HTTPS: IssueDefinition(
        severity=IssueSeverity.CRITICAL,
        description="URL does not use the HTTPS protocol",
        recommendation="Serve the page over HTTPS and redirect HTTP requests to it",
    ),
    UrlStructureIssueId.NOT_DESCRIPTIVE: IssueDefinition(
        severity=IssueSeverity.MEDIUM,
        description="URL path is not made of readable, descriptive words",
        recommendation="Use short lowercase words separated by hyphens that describe the page topic",
    ),
    UrlStructureIssueId.UNENCODED_SPACES: IssueDefinition(
        severity=IssueSeverity.HIGH,
        description="URL contains unencoded spaces",
        recommendation="Replace spaces with hyphens",
    ),
    UrlStructureIssueId.USES_UNDERSCORES: IssueDefinition(
        severity=IssueSeverity.LOW,
        description="URL uses underscores to separate words",
        recommendation="Use hyphens instead of underscores between words",
    ),
    UrlStructureIssueId.CONTAINS_UPPERCASE: IssueDefinition(
        severity=IssueSeverity.MEDIUM,
        description="URL contains uppercase letters",
        recommendation="Use lowercase URLs and redirect mixed-case variants",
    ),
    UrlStructureIssueId.SPECIAL_CHARACTERS: IssueDefinition(
        severity=IssueSeverity.HIGH,
        description="URL contains special characters that should be avoided",
        recommendation="Remove punctuation from the URL path and keep to letters, digits and hyphens",
    ),
    UrlStructureIssueId.DOUBLE_SLASHES: IssueDefinition(
        severity=IssueSeverity.MEDIUM,
        description="URL path contains double slashes",
        recommendation="Remove empty path segments and redirect to the clean URL",
    ),
    UrlStructureIssueId.KEYWORD_STUFFING: IssueDefinition(
        severity=IssueSeverity.LOW,
        description="URL repeats the same keyword several times",
        recommendation="Avoid keyword repetition in URL structure",
    ),
    UrlStructureIssueId.GENERIC_TERMS: IssueDefinition(
        severity=IssueSeverity.LOW,
        description="URL relies on generic terms instead of keywords",
        recommendation="Replace generic terms with descriptive keywords",
    ),
    UrlStructureIssueId.HIERARCHY_TOO_DEEP: IssueDefinition(
        severity=IssueSeverity.MEDIUM,
        description="URL hierarchy is too deep",
        recommendation="Flatten the site structure to 3-4 levels at most",
    ),
    UrlStructureIssueId.ILLOGICAL_HIERARCHY: IssueDefinition(
        severity=IssueSeverity.LOW,
        description="URL hierarchy does not read as parent-child relationship",
        recommendation="Order path segments from general to specific",
    ),
    UrlStructureIssueId.TOO_MANY_PARAMETERS: IssueDefinition(
        severity=IssueSeverity.MEDIUM,
        description="URL has more than 3 query parameters",
        recommendation="Move essential parameters into the path and drop tracking parameters",
    ),
    UrlStructureIssueId.HAS_FILE_EXTENSION: IssueDefinition(
        severity=IssueSeverity.LOW,
        description="URL exposes a server-side file extension",
        recommendation="Use extension-less URLs",
    ),
})


create_url_structure_issue = URL_STRUCTURE_ISSUES.create
