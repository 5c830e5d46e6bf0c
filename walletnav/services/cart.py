"""Read-only view of the storefront cart, as consumed by the navigation bar."""

from __future__ import annotations

from typing import Any, Callable, Protocol, Sequence


class CartCounter(Protocol):
    """Anything that can report how many items are in the cart."""

    def count(self) -> int:
        ...


class SequenceCartCounter:
    """Counts the items of a cart owned by someone else."""

    def __init__(self, items: Sequence[Any] | Callable[[], Sequence[Any]]):
        self._items = items

    def count(self) -> int:
        items = self._items() if callable(self._items) else self._items
        return len(items)


class EmptyCart:
    def count(self) -> int:
        return 0


__all__ = ["CartCounter", "SequenceCartCounter", "EmptyCart"]
