"""Exception types raised by the security core."""


class SecurityCoreError(Exception):
    """Base exception for security core errors."""

    pass


class AdapterError(SecurityCoreError):
    """Raised when a collaborator adapter call fails.

    Wraps whatever went wrong inside the backend (network, backend or
    validation failure). The original exception is kept as ``__cause__``.
    """

    def __init__(self, adapter: str, message: str) -> None:
        self.adapter = adapter
        super().__init__(f"{adapter} adapter failed: {message}")


class UninitializedError(SecurityCoreError):
    """Raised when a handler is used before its orchestrator is configured."""

    pass
