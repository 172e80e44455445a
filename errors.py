from typing import Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer.

    ``kind`` names the error for API clients, ``reason`` carries the
    policy or state machine code when there is one.
    """

    kind = "ServiceError"

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason


class ValidationError(ServiceError):
    kind = "ValidationError"


class NotFound(ServiceError):
    kind = "NotFound"


class Conflict(ServiceError):
    kind = "Conflict"


class Forbidden(ServiceError):
    kind = "Forbidden"

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(message or reason, reason)


class InvalidTransition(ServiceError):
    kind = "InvalidTransition"

    def __init__(self, message: str, reason: str = "InvalidTransition"):
        super().__init__(message, reason)


class TerminalStateViolation(InvalidTransition):
    kind = "TerminalStateViolation"

    def __init__(self, message: str):
        super().__init__(message, "TerminalStateViolation")


class PersistenceError(ServiceError):
    kind = "PersistenceError"


class ConcurrentModification(PersistenceError):
    kind = "ConcurrentModification"
