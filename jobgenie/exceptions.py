"""Exception hierarchy for JobGenie."""


class JobGenieError(Exception):
    """Base exception for all JobGenie errors."""


class InvalidSearchInputError(JobGenieError):
    """Raised when search text and refinements are both missing or unusable."""


class InsufficientCreditsError(JobGenieError):
    """Raised when the user has no search credits left."""


class CollaboratorError(JobGenieError):
    """Raised by a collaborator adapter (search, LLM, page fetch) on timeout or transport failure."""

    def __init__(self, collaborator: str, message: str) -> None:
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator


class CreditLedgerError(JobGenieError):
    """Raised when the credit ledger itself cannot be reached or answers inconsistently."""
