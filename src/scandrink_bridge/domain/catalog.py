"""Server-side item catalog."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(slots=True, frozen=True)
class CatalogItem:
    """Price and relay wiring of one sellable item."""

    price: int
    relay: int


DEFAULT_CATALOG: Mapping[str, CatalogItem] = MappingProxyType(
    {
        "Air Putih": CatalogItem(price=100, relay=1),
        "Teh": CatalogItem(price=100, relay=2),
    }
)


class ItemCatalog:
    """Resolve trusted item names to price and relay.

    Prices always come from here, never from the client request.
    """

    def __init__(self, items: Mapping[str, CatalogItem] | None = None) -> None:
        self._items = dict(DEFAULT_CATALOG if items is None else items)

    def get(self, item_name: str) -> CatalogItem | None:
        """Return catalog entry or None for unknown items."""

        return self._items.get(item_name)

    def relay_for(self, item_name: str) -> int | None:
        item = self._items.get(item_name)
        return None if item is None else item.relay

    def relays(self) -> list[int]:
        """Return every wired relay id in ascending order."""

        return sorted({item.relay for item in self._items.values()})


__all__ = ["CatalogItem", "DEFAULT_CATALOG", "ItemCatalog"]
