"""
Regime Grouper.

Partitions invoice line items by customs regime and, within a regime,
by HS code. Both partitions keep keys in first-seen order so the report
lists regimes and tariff lines in invoice order.
"""

from collections import OrderedDict
from typing import Callable, Generic, Hashable, Iterable, Iterator, List, Tuple, TypeVar

from .models import InvoiceLineItem

T = TypeVar('T')


class OrderedGroups(Generic[T]):
    """
    Mapping of key -> items that remembers the order keys were first seen.

    Example:
        >>> groups = OrderedGroups.group_by(["b1", "a1", "b2"], lambda s: s[0])
        >>> list(groups.keys())
        ['b', 'a']
        >>> groups['b']
        ['b1', 'b2']
    """

    def __init__(self) -> None:
        self._groups: 'OrderedDict[Hashable, List[T]]' = OrderedDict()

    @classmethod
    def group_by(
        cls,
        items: Iterable[T],
        key: Callable[[T], Hashable]
    ) -> 'OrderedGroups[T]':
        """Partition ``items`` by ``key(item)``."""
        groups = cls()
        for item in items:
            groups.add(key(item), item)
        return groups

    def add(self, key: Hashable, item: T) -> None:
        if key not in self._groups:
            self._groups[key] = []
        self._groups[key].append(item)

    def keys(self) -> List[Hashable]:
        return list(self._groups.keys())

    def items(self) -> List[Tuple[Hashable, List[T]]]:
        return [(key, list(values)) for key, values in self._groups.items()]

    def __getitem__(self, key: Hashable) -> List[T]:
        return list(self._groups[key])

    def __contains__(self, key: object) -> bool:
        return key in self._groups

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        sizes = ", ".join(f"{key}: {len(values)}" for key, values in self._groups.items())
        return f"OrderedGroups({sizes})"


def group_by_regime(
    items: Iterable[InvoiceLineItem],
    fallback_regime: str = "UNKNOWN"
) -> OrderedGroups[InvoiceLineItem]:
    """
    Group line items by regime code.

    Codes are not validated here; unknown codes are kept verbatim and get
    a generic label downstream. Items without a code share the fallback
    bucket.

    Args:
        items: Invoice line items in invoice order.
        fallback_regime: Key used for items with an empty regime.

    Returns:
        OrderedGroups keyed by regime code.
    """
    return OrderedGroups.group_by(items, lambda item: item.regime or fallback_regime)


def group_by_hs_code(
    items: Iterable[InvoiceLineItem],
    fallback_hs_code: str = "UNKNOWN"
) -> OrderedGroups[InvoiceLineItem]:
    """Group one regime's items by HS code; unclassified items share ``fallback_hs_code``."""
    return OrderedGroups.group_by(items, lambda item: item.hs_code or fallback_hs_code)
