"""
Application errors for clean API error handling.

Use ServiceUnavailableError when a provider (vector index, embeddings, LLM)
is misconfigured so the API can return 503 with a user-facing message.
The answer pipeline itself never raises these; it reports failures as Results.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required provider is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
