"""
Result container that makes LLM fallbacks explicit at the call site.
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union, cast

T = TypeVar('T')
E = TypeVar('E', bound=Exception)
U = TypeVar('U')


@dataclass(frozen=True)
class Result(Generic[T, E]):
    """Either a successful value or the error that prevented it."""

    _value: Union[T, E]
    _is_ok: bool

    @classmethod
    def ok(cls, value: T) -> 'Result[T, E]':
        return cls(_value=value, _is_ok=True)

    @classmethod
    def err(cls, error: E) -> 'Result[T, E]':
        return cls(_value=error, _is_ok=False)

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        return not self._is_ok

    @property
    def error(self) -> E:
        if self._is_ok:
            raise ValueError('Result is ok and carries no error')
        return cast(E, self._value)

    def unwrap(self) -> T:
        if not self._is_ok:
            raise cast(E, self._value)
        return cast(T, self._value)

    def unwrap_or(self, default: T) -> T:
        return cast(T, self._value) if self._is_ok else default

    def unwrap_or_else(self, fallback: Callable[[E], T]) -> T:
        """Return the value, or compute a replacement from the error.

        Args:
            fallback: Called with the error when the result is not ok

        Returns:
            The wrapped value or the fallback's return value
        """
        if self._is_ok:
            return cast(T, self._value)
        return fallback(cast(E, self._value))

    def map(self, fn: Callable[[T], U]) -> 'Result[U, E]':
        if self._is_ok:
            return Result.ok(fn(cast(T, self._value)))
        return cast('Result[U, E]', self)
