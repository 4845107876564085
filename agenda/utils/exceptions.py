"""Base exceptions shared by every agenda package."""


class AgendaError(Exception):
    """Base exception for all agenda errors.

    Subpackages derive their own errors from this class so callers can catch
    everything raised by the core with a single ``except AgendaError``.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
