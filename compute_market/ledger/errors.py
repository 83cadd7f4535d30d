"""Error kinds and the tagged result returned by every ledger operation."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class LedgerError(Enum):
    """Why a ledger operation was rejected.

    Member values are the numeric codes of the deployed contract interface.
    """

    NOT_FOUND = 101
    UNAUTHORIZED = 102
    ALREADY_EXISTS = 103
    INVALID_AMOUNT = 104
    INSUFFICIENT_BALANCE = 105

    @property
    def code(self) -> int:
        return self.value

    @property
    def kind(self) -> str:
        """Lower-case name used on the wire, e.g. ``not_found``."""
        return self.name.lower()


class LedgerRejected(Exception):
    """Raised by ``Err.unwrap()`` for hosts that prefer exception flow."""

    def __init__(self, error: LedgerError):
        super().__init__(f"{error.kind} ({error.code})")
        self.error = error


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying the operation's value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Rejected outcome carrying one ledger error kind."""

    error: LedgerError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        raise LedgerRejected(self.error)


Result = Union[Ok[T], Err]
