from __future__ import annotations

from typing import Any


class RosterError(Exception):
    """Base class for roster engine errors."""


class ValidationError(RosterError):
    """Raised when input is rejected before any write is attempted."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(RosterError):
    """Raised when a referenced shift or exception record does not exist."""

    def __init__(self, entity: str, key: Any) -> None:
        super().__init__(f"{entity} {key!r} not found")
        self.entity = entity
        self.key = key


class ConsistencyError(RosterError):
    """A write would violate roster consistency for a specific officer."""

    def __init__(self, message: str, *, officer_id: int | None = None) -> None:
        super().__init__(message)
        self.officer_id = officer_id


class OfficerOnLeaveError(ConsistencyError):
    pass


class PartnershipConflictError(ConsistencyError):
    pass


class PartnershipStateError(ConsistencyError):
    pass


class MissingPartnerReferenceError(ConsistencyError):
    """The partner of a partnership could not be determined; nothing was written."""


class PartialWriteError(RosterError):
    """One side of a two-sided write succeeded and the other did not.

    ``compensated`` tells whether the succeeded side was reverted. When it is
    False, ``detail`` holds the snapshot needed to reconcile by hand.
    """

    def __init__(
        self,
        operation: str,
        *,
        written: list[int],
        failed_officer_id: int,
        compensated: bool,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        state = "compensated" if compensated else "NOT compensated"
        super().__init__(
            f"{operation} failed for officer {failed_officer_id} after writing {written} ({state})"
        )
        self.operation = operation
        self.written = written
        self.failed_officer_id = failed_officer_id
        self.compensated = compensated
        self.detail = detail or {}
        self.cause = cause
