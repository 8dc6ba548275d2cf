"""Catalog loading, category derivation and menu filtering."""

import logging
from collections.abc import Sequence

from restaurant_menu_site.models.menu_models import ALL_CATEGORY, Category, MenuItem
from restaurant_menu_site.observability.metrics import record_catalog_load
from restaurant_menu_site.services.data_service_client import DataServiceClient

logger = logging.getLogger(__name__)

# Preferred display order of categories, keyed by English label
CATEGORY_ORDER: tuple[str, ...] = (
    "All",
    "Appetisers",
    "BBQ",
    "DimSum",
    "Cold-dressed",
    "Soup",
    "Meat",
    "Superior Luxurious",
    "Emperor's Seafood",
    "Global Seafood",
    "Tofu & Vegetables",
    "Rice & Noodles",
    "Desserts",
    "Beverages",
    "Other",
)

_CATEGORY_RANK = {name: index for index, name in enumerate(CATEGORY_ORDER)}


def derive_categories(items: Sequence[MenuItem]) -> list[Category]:
    """Derive the ordered category list from loaded items.

    The first (en, cn) pair seen for each English label is kept. Categories
    in CATEGORY_ORDER come first in table order, the rest follow sorted by
    English label. The synthetic "All" category is always first and only
    once; a row labelled "All" still shows under it but adds no category.

    Args:
        items: Items in fetch order

    Returns:
        Category list starting with "All"
    """
    seen: dict[str, Category] = {}
    for item in items:
        if item.category_en != ALL_CATEGORY.en and item.category_en not in seen:
            seen[item.category_en] = Category(en=item.category_en, cn=item.category_cn)

    known = sorted(
        (c for c in seen.values() if c.en in _CATEGORY_RANK), key=lambda c: _CATEGORY_RANK[c.en]
    )
    unknown = sorted((c for c in seen.values() if c.en not in _CATEGORY_RANK), key=lambda c: c.en)

    return [ALL_CATEGORY, *known, *unknown]


def _contains_folded(text: str, query: str) -> bool:
    return query.lower() in text.lower()


def matches_query(item: MenuItem, query: str) -> bool:
    """Whether an item matches the search text.

    English fields match case-insensitively, Chinese fields match as typed.
    """
    if query == "":
        return True
    return (
        _contains_folded(item.name_en, query)
        or query in item.name_cn
        or _contains_folded(item.ingredients_en, query)
        or query in item.ingredients_cn
    )


def filter_menu_items(items: Sequence[MenuItem], category: str, query: str) -> list[MenuItem]:
    """Filter items by category and search text, keeping source order.

    Args:
        items: Loaded items in display-rank order
        category: English category label, or "All"
        query: Search text; empty matches everything

    Returns:
        Matching items in fetch order
    """
    return [
        item
        for item in items
        if (category == ALL_CATEGORY.en or item.category_en == category)
        and matches_query(item, query)
    ]


class CatalogService:
    """Holds the loaded menu and serves filtered views of it.

    The collection is replaced wholesale on each successful load; a failed
    load keeps whatever was loaded before. The category list is a projection
    of the collection and is recomputed only when the collection changes.
    """

    def __init__(self, data_service_client: DataServiceClient) -> None:
        """Initialize the catalog.

        Args:
            data_service_client: Client for fetching menu rows
        """
        self.data_service_client = data_service_client
        self._items: tuple[MenuItem, ...] = ()
        self._categories_source: tuple[MenuItem, ...] | None = None
        self._categories: list[Category] = [ALL_CATEGORY]
        self.loaded = False

    @property
    def items(self) -> tuple[MenuItem, ...]:
        return self._items

    @property
    def categories(self) -> list[Category]:
        """Ordered categories for the current collection."""
        if self._categories_source is not self._items:
            self._categories = derive_categories(self._items)
            self._categories_source = self._items
        return list(self._categories)

    async def load(self) -> bool:
        """Fetch available items once, replacing the collection on success.

        Returns:
            True if the collection was replaced, False if the fetch failed
        """
        rows = await self.data_service_client.list_available_items()
        if rows is None:
            logger.error("Catalog load failed, keeping previously loaded items")
            record_catalog_load(success=False)
            return False

        self._items = tuple(MenuItem.from_row(row) for row in rows)
        self.loaded = True
        record_catalog_load(success=True, item_count=len(self._items))
        logger.info(f"Catalog loaded with {len(self._items)} items")
        return True

    async def ensure_loaded(self) -> None:
        """Load the catalog if no load has succeeded yet."""
        if not self.loaded:
            await self.load()

    def filter(self, category: str = "All", query: str = "") -> list[MenuItem]:
        """Filter the loaded collection. Performs no I/O."""
        return filter_menu_items(self._items, category, query)

    async def get_item(self, item_id: str) -> MenuItem | None:
        """Fetch a single item for the detail view.

        Args:
            item_id: The item id

        Returns:
            The item, or None when it is missing or the fetch failed
        """
        row = await self.data_service_client.get_item_by_id(item_id)
        if row is None:
            return None
        return MenuItem.from_row(row)
