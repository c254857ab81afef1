"""
exceptions.py — Project Exception Hierarchy

Every error raised by the wizard, the submission translator and the
datastore/storage wrappers derives from CompanyProfileError, so the API layer
and the wizard's submit path can tell project failures apart from bugs.
"""


class CompanyProfileError(Exception):
    """Base class for all project errors."""

    pass


# =============================================================================
# Wizard
# =============================================================================


class WizardError(CompanyProfileError):
    """Misuse of a wizard session."""

    pass


class InvalidTransitionError(WizardError):
    """The requested transition is not available from the current state."""

    pass


class UnknownFieldError(WizardError):
    """Field name is not a scalar form field (or not a field of the record)."""

    pass


class UnknownSectionError(WizardError):
    """Section name is not one of the list-valued form sections."""

    pass


class EntryIndexError(WizardError):
    """Position is outside the list being edited."""

    pass


# =============================================================================
# External collaborators
# =============================================================================


class DatastoreError(CompanyProfileError):
    """A select/insert/update/delete against the datastore failed."""

    pass


class CompanyNotFoundError(DatastoreError):
    """The company requested for editing does not exist."""

    pass


class AssetUploadError(CompanyProfileError):
    """Uploading a logo or filing document to storage failed."""

    pass


# =============================================================================
# Submission
# =============================================================================


class ResolutionError(CompanyProfileError):
    """A placeholder company or canonical investor could not be created."""

    pass


class InvariantViolationError(CompanyProfileError):
    """Submission would write data breaking a hard invariant."""

    pass


# =============================================================================
# Authorization
# =============================================================================


class AccessDeniedError(CompanyProfileError):
    """The session's role may not modify company data."""

    def __init__(self, role: str, message: str = "Only Administrators are allowed to access this page."):
        super().__init__(message)
        self.role = role
