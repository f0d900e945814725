"""Error taxonomy shared by services and adapters."""
from typing import Optional


class RagDeskError(Exception):
    """Base error for the question-answering pipeline."""


class ConfigurationError(RagDeskError):
    """Missing or invalid credentials / endpoints. Never retried."""


class InvalidRequestError(RagDeskError):
    """Malformed input, rejected before any collaborator call."""


class RetrievalError(RagDeskError):
    """Candidate fetching failed as a whole."""


class UpstreamError(RagDeskError):
    """Transport or HTTP failure of an external collaborator."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        if self.status_code is None:
            return False
        return self.status_code == 429 or 500 <= self.status_code < 600
