"""
Application errors.

Tool failures never show up here: the vector_search tool turns them into JSON
envelopes. These classes cover configuration, upstream HTTP failures, backoff
exhaustion and turn-level agent failures surfaced to the API.
"""


class ConfigurationError(Exception):
    """Raised at startup when a required credential or setting is missing."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UpstreamError(Exception):
    """Raised when an upstream HTTP API (e.g. HF embeddings) returns an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class MaxRetriesExceededError(Exception):
    """Raised when an operation is still rate limited after every backoff attempt."""

    def __init__(self, message: str = "Max retries exceeded") -> None:
        self.message = message
        super().__init__(message)


class AgentError(Exception):
    """A turn failed. Carries the user-facing message returned by the API."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RateLimitedError(AgentError):
    def __init__(self, message: str = "Rate limited; try again later.") -> None:
        super().__init__(message)


class AuthenticationError(AgentError):
    def __init__(self, message: str = "Authentication error; check API key.") -> None:
        super().__init__(message)


class RecursionCapError(AgentError):
    """Raised when the model keeps requesting tools past the per-turn cycle cap."""

    def __init__(self, max_cycles: int) -> None:
        self.max_cycles = max_cycles
        super().__init__(f"Agent error: tool-call loop exceeded {max_cycles} cycles")
