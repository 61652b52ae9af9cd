"""Custom exception hierarchy for the thesis agent."""


class AgentError(Exception):
    """Base exception for agent-level issues."""


class ConfigurationError(AgentError):
    """Raised when configuration is invalid or missing."""


class ToolRegistryError(ConfigurationError):
    """Raised when the tool catalogue is inconsistent (duplicate or missing tools)."""


class ExternalServiceError(AgentError):
    """Raised when an external dependency responds with an error."""


class ModelError(ExternalServiceError):
    """Raised when the language model is unreachable or returns unusable output."""


class RefinementError(ModelError):
    """Raised when a prompt refinement produced no refined prompt."""


class StoreError(AgentError):
    """Raised when the persistent store rejects or cannot perform an operation.

    ``retryable`` is false when the same operation is bound to fail again
    (constraint violations, malformed records).
    """

    def __init__(self, message: str, *, retryable: bool = True) -> None:
        super().__init__(message)
        self.retryable = retryable


class DocumentError(AgentError):
    """Raised when a submitted document is not a well-formed data URI."""


class UnsupportedDocumentError(DocumentError):
    """Raised when a document's MIME type cannot be read as text."""
