"""Unit tests for catalog loading, category derivation and filtering."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from restaurant_menu_site.models.menu_models import ALL_CATEGORY, Category, MenuItem, MenuRow
from restaurant_menu_site.services.catalog_service import (
    CATEGORY_ORDER,
    CatalogService,
    derive_categories,
    filter_menu_items,
    matches_query,
)
from restaurant_menu_site.services.data_service_client import DataServiceClient


def _item(item_id: str, category_en: str, category_cn: str = "", **overrides: str) -> MenuItem:
    data = {
        "id": item_id,
        "category_en": category_en,
        "category_cn": category_cn or category_en,
        "name_en": f"Dish {item_id}",
        "name_cn": f"菜 {item_id}",
        "price": Decimal("1.00"),
        "images": ("/placeholder.svg",),
    }
    data.update(overrides)
    return MenuItem(**data)


@pytest.fixture
def items(mock_rows: list[MenuRow]) -> list[MenuItem]:
    return [MenuItem.from_row(row) for row in mock_rows]


@pytest.mark.unit
class TestDeriveCategories:
    """Tests for derive_categories."""

    def test_all_is_always_first(self) -> None:
        """Test that an empty collection still yields All."""
        assert derive_categories([]) == [ALL_CATEGORY]

    def test_preferred_categories_follow_table_order(self, items: list[MenuItem]) -> None:
        """Test that preferred categories are ordered by the table, not fetch order."""
        categories = derive_categories(items)

        assert categories == [
            ALL_CATEGORY,
            Category(en="Appetisers", cn="开胃菜"),
            Category(en="Soup", cn="汤"),
        ]

    def test_unknown_categories_sort_alphabetically_after_preferred(self) -> None:
        """Test that categories outside the table come last, alphabetically."""
        categories = derive_categories(
            [
                _item("1", "Zucchini Specials"),
                _item("2", "Beverages"),
                _item("3", "Chef's Table"),
                _item("4", "Appetisers"),
            ]
        )

        assert [c.en for c in categories] == [
            "All",
            "Appetisers",
            "Beverages",
            "Chef's Table",
            "Zucchini Specials",
        ]

    def test_first_occurrence_wins(self) -> None:
        """Test that the first Chinese label seen for a category is kept."""
        categories = derive_categories([_item("1", "Soup", "汤"), _item("2", "Soup", "汤羹")])

        assert categories[1] == Category(en="Soup", cn="汤")

    def test_category_identity_is_case_sensitive(self) -> None:
        """Test that labels differing in case are distinct categories."""
        categories = derive_categories([_item("1", "soup"), _item("2", "Soup")])

        assert [c.en for c in categories] == ["All", "Soup", "soup"]

    def test_order_is_deterministic(self, items: list[MenuItem]) -> None:
        """Test that fetch order does not change the category order."""
        assert derive_categories(items) == derive_categories(list(reversed(items)))

    def test_row_labelled_all_adds_no_category(self) -> None:
        """Test that "All" appears once even when a row is categorized as "All"."""
        rows = [_item("1", "All", "所有"), _item("2", "Soup", "汤")]

        categories = derive_categories(rows)

        assert categories == [ALL_CATEGORY, Category(en="Soup", cn="汤")]
        assert [i.id for i in filter_menu_items(rows, ALL_CATEGORY.en, "")] == ["1", "2"]

    def test_preference_table_starts_with_all(self) -> None:
        """Test the fixed preference table."""
        assert CATEGORY_ORDER[0] == "All"
        assert CATEGORY_ORDER.index("Soup") < CATEGORY_ORDER.index("Desserts")


@pytest.mark.unit
class TestFilterMenuItems:
    """Tests for filter_menu_items."""

    def test_all_with_empty_query_is_identity(self, items: list[MenuItem]) -> None:
        """Test that All and an empty query return every item in order."""
        assert filter_menu_items(items, "All", "") == items

    def test_category_filter(self, items: list[MenuItem]) -> None:
        """Test exact category matching."""
        result = filter_menu_items(items, "Soup", "")

        assert [i.id for i in result] == ["item_1", "item_3"]

    def test_category_filter_is_case_sensitive(self, items: list[MenuItem]) -> None:
        """Test that category labels must match exactly."""
        assert filter_menu_items(items, "soup", "") == []

    def test_english_name_match_is_case_insensitive(self, items: list[MenuItem]) -> None:
        """Test case folding on English names."""
        result = filter_menu_items(items, "All", "WONTON")

        assert [i.id for i in result] == ["item_3"]

    def test_chinese_name_match(self, items: list[MenuItem]) -> None:
        """Test substring matching on Chinese names."""
        result = filter_menu_items(items, "All", "鱿鱼")

        assert [i.id for i in result] == ["item_2"]

    def test_ingredient_match_returns_only_matching_item(self, items: list[MenuItem]) -> None:
        """Test that an ingredient present in one item selects just that item."""
        result = filter_menu_items(items, "All", "ginger")

        assert [i.id for i in result] == ["item_2"]

    def test_chinese_ingredient_match(self, items: list[MenuItem]) -> None:
        """Test substring matching on Chinese ingredients."""
        result = filter_menu_items(items, "All", "竹笋")

        assert [i.id for i in result] == ["item_1"]

    def test_category_and_query_must_both_match(self, items: list[MenuItem]) -> None:
        """Test that category and query predicates combine with AND."""
        assert filter_menu_items(items, "Appetisers", "soup") == []
        assert [i.id for i in filter_menu_items(items, "Soup", "sour")] == ["item_1"]

    def test_result_keeps_source_order(self, items: list[MenuItem]) -> None:
        """Test that matches are not re-sorted."""
        result = filter_menu_items(items, "All", "soup")

        assert [i.id for i in result] == ["item_1", "item_3"]

    def test_filter_is_idempotent(self, items: list[MenuItem]) -> None:
        """Test that filtering twice gives the same result."""
        once = filter_menu_items(items, "Soup", "o")

        assert filter_menu_items(once, "Soup", "o") == once

    def test_no_match(self, items: list[MenuItem]) -> None:
        """Test a query matching nothing."""
        assert filter_menu_items(items, "All", "pizza") == []


@pytest.mark.unit
class TestMatchesQuery:
    """Tests for matches_query."""

    def test_empty_query_matches(self) -> None:
        assert matches_query(_item("1", "Soup"), "") is True

    def test_chinese_fields_are_not_case_folded(self) -> None:
        """Test that Chinese fields match as typed."""
        item = _item("1", "Soup", name_cn="XO酱炒饭", name_en="Fried rice")

        assert matches_query(item, "XO") is True
        assert matches_query(item, "xo酱") is False


@pytest.mark.unit
class TestCatalogService:
    """Test suite for CatalogService."""

    @pytest.fixture
    def mock_client(self) -> DataServiceClient:
        return MagicMock(spec=DataServiceClient)

    @pytest.fixture
    def catalog(self, mock_client: DataServiceClient) -> CatalogService:
        return CatalogService(data_service_client=mock_client)

    def test_initial_state(self, catalog: CatalogService) -> None:
        """Test that a new catalog is empty with only All."""
        assert catalog.items == ()
        assert catalog.categories == [ALL_CATEGORY]
        assert catalog.loaded is False

    @pytest.mark.asyncio
    async def test_load_success(
        self, catalog: CatalogService, mock_client: DataServiceClient, mock_rows: list[MenuRow]
    ) -> None:
        """Test that a load replaces the collection and categories."""
        mock_client.list_available_items = AsyncMock(return_value=mock_rows)

        assert await catalog.load() is True

        assert [i.id for i in catalog.items] == ["item_1", "item_2", "item_3"]
        assert [c.en for c in catalog.categories] == ["All", "Appetisers", "Soup"]
        assert catalog.loaded is True

    @pytest.mark.asyncio
    async def test_images_never_empty_after_load(
        self, catalog: CatalogService, mock_client: DataServiceClient, mock_rows: list[MenuRow]
    ) -> None:
        """Test the placeholder substitution over a loaded collection."""
        mock_client.list_available_items = AsyncMock(return_value=mock_rows)

        await catalog.load()

        assert all(len(item.images) >= 1 for item in catalog.items)

    @pytest.mark.asyncio
    async def test_load_failure_keeps_previous_items(
        self, catalog: CatalogService, mock_client: DataServiceClient, mock_rows: list[MenuRow]
    ) -> None:
        """Test that a failed reload leaves the stale collection in place."""
        mock_client.list_available_items = AsyncMock(side_effect=[mock_rows, None])

        await catalog.load()
        before = catalog.items

        assert await catalog.load() is False
        assert catalog.items is before

    @pytest.mark.asyncio
    async def test_load_replaces_collection_wholesale(
        self, catalog: CatalogService, mock_client: DataServiceClient, mock_rows: list[MenuRow]
    ) -> None:
        """Test that a second load does not merge with the first."""
        mock_client.list_available_items = AsyncMock(side_effect=[mock_rows, mock_rows[:1]])

        await catalog.load()
        await catalog.load()

        assert [i.id for i in catalog.items] == ["item_1"]
        assert [c.en for c in catalog.categories] == ["All", "Soup"]

    @pytest.mark.asyncio
    async def test_categories_recomputed_only_on_change(
        self, catalog: CatalogService, mock_client: DataServiceClient, mock_rows: list[MenuRow]
    ) -> None:
        """Test that categories are cached until the collection changes."""
        mock_client.list_available_items = AsyncMock(return_value=mock_rows)
        await catalog.load()

        first = catalog.categories
        cached = catalog._categories
        second = catalog.categories

        assert first == second
        assert catalog._categories is cached

    @pytest.mark.asyncio
    async def test_ensure_loaded_fetches_once(
        self, catalog: CatalogService, mock_client: DataServiceClient, mock_rows: list[MenuRow]
    ) -> None:
        """Test that ensure_loaded does not refetch after a successful load."""
        mock_client.list_available_items = AsyncMock(return_value=mock_rows)

        await catalog.ensure_loaded()
        await catalog.ensure_loaded()

        mock_client.list_available_items.assert_called_once()

    @pytest.mark.asyncio
    async def test_filter_does_no_io(
        self, catalog: CatalogService, mock_client: DataServiceClient, mock_rows: list[MenuRow]
    ) -> None:
        """Test that filtering uses the loaded collection only."""
        mock_client.list_available_items = AsyncMock(return_value=mock_rows)
        await catalog.load()

        result = catalog.filter(category="Soup", query="wonton")

        assert [i.id for i in result] == ["item_3"]
        mock_client.list_available_items.assert_called_once()

    @pytest.mark.asyncio
    async def test_get_item_found(
        self, catalog: CatalogService, mock_client: DataServiceClient, mock_rows: list[MenuRow]
    ) -> None:
        """Test the detail fetch."""
        mock_client.get_item_by_id = AsyncMock(return_value=mock_rows[2])

        item = await catalog.get_item("item_3")

        assert item is not None
        assert item.images == ("/placeholder.svg",)
        mock_client.get_item_by_id.assert_called_once_with("item_3")

    @pytest.mark.asyncio
    async def test_get_item_not_found(self, catalog: CatalogService, mock_client: DataServiceClient) -> None:
        """Test that a missing item returns None."""
        mock_client.get_item_by_id = AsyncMock(return_value=None)

        assert await catalog.get_item("missing") is None
