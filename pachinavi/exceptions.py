"""Typed exceptions for the trade engine.

Every error carries a machine-readable ``code`` so callers (CLI, web layer)
can react by type or code instead of parsing messages.

    TradeEngineError
    +-- NotFoundError                 NOT_FOUND
    +-- UnauthorizedError             UNAUTHORIZED
    +-- ValidationFailedError         VALIDATION_FAILED
    +-- IllegalTransitionError        ILLEGAL_TRANSITION
    +-- ConcurrentModificationError   CONCURRENT_MODIFICATION

A command that raises any of these leaves the stored trade untouched.
"""

from typing import Optional


class TradeEngineError(Exception):
    """Base class for all trade engine errors."""

    code: str = "TRADE_ENGINE_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(TradeEngineError):
    """Referenced trade or contact does not exist."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class UnauthorizedError(TradeEngineError):
    """Actor is not a bound party, or acts in the wrong role."""

    code = "UNAUTHORIZED"

    def __init__(self, trade_id: str, actor_id: str, reason: str):
        self.trade_id = trade_id
        self.actor_id = actor_id
        self.reason = reason
        super().__init__(f"User {actor_id!r} may not act on trade {trade_id}: {reason}")


class ValidationFailedError(TradeEngineError):
    """A guard precondition is unmet."""

    code = "VALIDATION_FAILED"

    def __init__(self, fields: list[str], message: Optional[str] = None):
        self.fields = list(fields)
        super().__init__(message or f"Missing required fields: {', '.join(self.fields)}")


class IllegalTransitionError(TradeEngineError):
    """Transition is not defined from the trade's current status."""

    code = "ILLEGAL_TRANSITION"

    def __init__(self, status: str, transition: str):
        self.status = status
        self.transition = transition
        super().__init__(f"Cannot {transition} a trade in status {status}")


class ConcurrentModificationError(TradeEngineError):
    """The stored trade changed since it was loaded."""

    code = "CONCURRENT_MODIFICATION"

    def __init__(self, trade_id: str, expected_version: int):
        self.trade_id = trade_id
        self.expected_version = expected_version
        super().__init__(
            f"Trade {trade_id} was modified concurrently (expected version {expected_version})"
        )
