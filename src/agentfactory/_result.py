"""Tagged-union result type for operations that fail on structural input errors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Literal, NoReturn, TypeVar

if TYPE_CHECKING:
    from ._errors import CompileError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def unwrap(self) -> T:
        """Return the carried value."""
        return self.value


@dataclass(frozen=True, slots=True)
class Err:
    """Failed outcome carrying the first error encountered."""

    error: CompileError

    def is_ok(self) -> Literal[False]:
        return False

    def unwrap(self) -> NoReturn:
        """Raise the carried error."""
        raise self.error


Result = Ok[T] | Err
