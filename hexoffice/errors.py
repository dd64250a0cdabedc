"""Error and warning types raised by hexoffice.

Hard errors block a computation (bad layout data, invalid writes). Soft
problems are warnings: the engine picks a deterministic answer and keeps going
so counts and listings always return something usable.
"""

from __future__ import annotations

import warnings

from .logging_utils import log_warning


class HexOfficeError(Exception):
    """Base class for all hexoffice errors."""


class SpaceValidationError(HexOfficeError, ValueError):
    """A space footprint is malformed (non-positive size, disallowed coordinates)."""

    def __init__(self, message: str, *, space_id: str | None = None):
        super().__init__(message)
        self.space_id = space_id


class SpaceNotFoundError(HexOfficeError, LookupError):
    """A space id does not exist on the requested map."""


class SpaceNotReservableError(HexOfficeError, ValueError):
    """The target space can never be reserved (``invalid_space``)."""


class ReservationValidationError(HexOfficeError, ValueError):
    """A reservation write carries an unusable time window."""


class ReservationConflictError(HexOfficeError, ValueError):
    """The logical space already has an overlapping active reservation."""


class ReservationNotFoundError(HexOfficeError, LookupError):
    """A reservation id does not exist in the store."""


class OrphanReferenceWarning(UserWarning):
    """A reservation references a space that is not in the current layout."""


class AmbiguousGroupingWarning(UserWarning):
    """Two spaces share cells or ids; the first one in list order wins."""


def warn_soft(message: str, category: type[UserWarning], *, stacklevel: int = 3) -> None:
    """Report a recoverable data problem through both the log and ``warnings``."""
    log_warning(message)
    warnings.warn(message, category, stacklevel=stacklevel)
