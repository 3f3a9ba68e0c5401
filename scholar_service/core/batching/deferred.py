"""Deferred values resolved by batch loader flushes.

A ``Deferred`` is a small promise type: resolvers obtain one from a loader,
register continuations with ``then()`` and return without blocking. The
resolution scheduler flushes loaders between passes; settling a deferred runs
its continuations synchronously, and any loads those continuations issue are
picked up by the next pass.

Absence is a first-class outcome. Keys a loader could not satisfy settle to
the ``ABSENT`` singleton rather than raising or staying pending.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class _Absent:
    """Marker for "no rows matched this key"."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


def is_absent(value: Any) -> bool:
    """Return True if ``value`` is the explicit absence marker."""
    return value is ABSENT


class DeferredState(enum.Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class DeferredPendingError(RuntimeError):
    """Raised when reading the result of a deferred that has not settled."""


class Deferred(Generic[T]):
    """A value that becomes available after a loader flush.

    Usage:
        section = loaders.load_one(Section, item.section)
        journal = section.then(lambda s: loaders.load_one(Issue, s.issue_id))
        name = journal.then(lambda i: loaders.load_one(Unit, i.unit_id)).then(
            lambda unit: unit.name
        )
        value = await scheduler.resolve(name)

    Continuations returning a ``Deferred`` are flattened: the outer deferred
    adopts the state of the returned one.
    """

    __slots__ = ("_callbacks", "_error", "_state", "_value", "label")

    def __init__(self, label: str | None = None) -> None:
        self._state = DeferredState.PENDING
        self._value: Any = None
        self._error: BaseException | None = None
        self._callbacks: list[Callable[[Deferred[T]], None]] = []
        self.label = label

    def __repr__(self) -> str:
        label = f" {self.label}" if self.label else ""
        return f"<Deferred{label} {self._state.value}>"

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def resolved(cls, value: T) -> Deferred[T]:
        deferred: Deferred[T] = cls()
        deferred.fulfill(value)
        return deferred

    @classmethod
    def coerce(cls, value: Deferred[T] | T) -> Deferred[T]:
        """Wrap a plain value so callers can treat everything as deferred."""
        if isinstance(value, Deferred):
            return value
        return cls.resolved(value)

    @classmethod
    def all(cls, items: Iterable[Deferred[Any] | Any]) -> Deferred[list[Any]]:
        """Settle once every item has settled, preserving order.

        Rejects with the first error encountered (in settle order).
        """
        parts = [cls.coerce(item) for item in items]
        combined: Deferred[list[Any]] = cls(label="all")
        if not parts:
            combined.fulfill([])
            return combined

        remaining = len(parts)

        def _on_settle(settled: Deferred[Any]) -> None:
            nonlocal remaining
            if not combined.is_pending:
                return
            if settled.is_rejected:
                combined.reject(settled.error)  # type: ignore[arg-type]
                return
            remaining -= 1
            if remaining == 0:
                combined.fulfill([p._value for p in parts])

        for part in parts:
            part._add_callback(_on_settle)
        return combined

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> DeferredState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._state is DeferredState.PENDING

    @property
    def is_fulfilled(self) -> bool:
        return self._state is DeferredState.FULFILLED

    @property
    def is_rejected(self) -> bool:
        return self._state is DeferredState.REJECTED

    @property
    def error(self) -> BaseException | None:
        return self._error

    def result(self) -> T:
        """Return the settled value or raise the rejection error.

        Raises:
            DeferredPendingError: If the deferred has not settled yet.
        """
        if self._state is DeferredState.PENDING:
            msg = f"{self!r} has not settled"
            raise DeferredPendingError(msg)
        if self._state is DeferredState.REJECTED:
            assert self._error is not None
            raise self._error
        return self._value

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def fulfill(self, value: T | Deferred[T]) -> None:
        """Settle with a value, or adopt the state of another deferred."""
        self._ensure_pending()
        if isinstance(value, Deferred):
            if value is self:
                self._settle(DeferredState.REJECTED, None, TypeError("Deferred cannot adopt itself"))
                return
            value._add_callback(self._adopt)
            return
        self._settle(DeferredState.FULFILLED, value, None)

    def reject(self, error: BaseException) -> None:
        self._ensure_pending()
        self._settle(DeferredState.REJECTED, None, error)

    def _adopt(self, other: Deferred[T]) -> None:
        if other.is_rejected:
            self._settle(DeferredState.REJECTED, None, other._error)
        else:
            self._settle(DeferredState.FULFILLED, other._value, None)

    def _ensure_pending(self) -> None:
        if self._state is not DeferredState.PENDING:
            msg = f"{self!r} is already settled"
            raise RuntimeError(msg)

    def _settle(self, state: DeferredState, value: Any, error: BaseException | None) -> None:
        self._state = state
        self._value = value
        self._error = error
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)

    def _add_callback(self, callback: Callable[[Deferred[T]], None]) -> None:
        if self._state is DeferredState.PENDING:
            self._callbacks.append(callback)
        else:
            callback(self)

    # ------------------------------------------------------------------
    # Chaining
    # ------------------------------------------------------------------

    def then(
        self,
        on_fulfilled: Callable[[T], U | Deferred[U]] | None = None,
        on_rejected: Callable[[BaseException], U | Deferred[U]] | None = None,
    ) -> Deferred[U]:
        """Chain a continuation, returning a new deferred for its result.

        An exception raised inside a continuation rejects the returned
        deferred instead of escaping into the loader flush that settled this
        one.
        """
        child: Deferred[U] = Deferred(label=self.label)

        def _run(parent: Deferred[T]) -> None:
            try:
                if parent.is_rejected:
                    if on_rejected is None:
                        child.reject(parent._error)  # type: ignore[arg-type]
                        return
                    child.fulfill(on_rejected(parent._error))  # type: ignore[arg-type]
                    return
                if on_fulfilled is None:
                    child.fulfill(parent._value)
                    return
                child.fulfill(on_fulfilled(parent._value))
            except Exception as exc:  # noqa: BLE001 - converted into a rejection
                if child.is_pending:
                    child.reject(exc)
                else:
                    raise

        self._add_callback(_run)
        return child

    def then_present(self, on_value: Callable[[T], U | Deferred[U]]) -> Deferred[U | Any]:
        """Like ``then`` but passes ``ABSENT`` through without calling ``on_value``."""
        return self.then(lambda value: value if value is ABSENT else on_value(value))


__all__ = [
    "ABSENT",
    "Deferred",
    "DeferredPendingError",
    "DeferredState",
    "is_absent",
]
