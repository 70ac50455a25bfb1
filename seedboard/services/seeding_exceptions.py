"""Custom exceptions for the seeding services."""

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from seedboard.services.validation import ValidationIssue


class SeedingError(Exception):
    """Base exception for seeding service errors."""
    pass


class InfluencerNotFoundError(SeedingError):
    """Raised when an influencer id does not exist."""
    pass


class ProjectNotFoundError(SeedingError):
    """Raised when a seeding project id does not exist."""
    pass


class TemplateNotFoundError(SeedingError):
    """Raised when an outreach template id does not exist."""
    pass


class GuideNotFoundError(SeedingError):
    """Raised when a product guide is missing or not public."""
    pass


class ValidationError(SeedingError):
    """Raised when form data fails field-level validation."""

    def __init__(self, issues: List["ValidationIssue"]):
        self.issues = issues
        super().__init__("; ".join(f"{issue.field}: {issue.message}" for issue in issues))
