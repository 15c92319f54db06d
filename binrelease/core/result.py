"""Result type for explicit error handling.

Release steps shell out to git, gh and the dependency resolver. Every one
of those calls can fail, and most failures must abort the CI job with a
useful message. Instead of scattering try/except through the flows, each
fallible operation returns a Result:

    def read_hash(path: Path) -> Result[str, ReleaseError]:
        if not path.is_file():
            return Err(ReleaseError(kind="hash_missing", message=str(path)))
        return Ok(path.read_text(encoding="utf-8").strip())

    match read_hash(path):
        case Ok(value):
            print(value)
        case Err(error):
            print(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")

__all__ = ["Err", "Ok", "Result"]


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result carrying `value`."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result carrying `error`."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]

