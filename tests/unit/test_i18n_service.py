"""Unit tests for language preference helpers."""

import pytest

from restaurant_menu_site.services.i18n_service import (
    empty_state_message,
    message,
    resolve_language,
    toggle_language,
)


@pytest.mark.unit
class TestLanguagePreference:
    """Tests for reading and toggling the language preference."""

    def test_resolve_known_values(self) -> None:
        assert resolve_language("en") == "en"
        assert resolve_language("cn") == "cn"

    def test_resolve_falls_back_to_english(self) -> None:
        """Test that missing or unknown values default to English."""
        assert resolve_language(None) == "en"
        assert resolve_language("fr") == "en"

    def test_toggle(self) -> None:
        assert toggle_language("en") == "cn"
        assert toggle_language("cn") == "en"


@pytest.mark.unit
class TestMessages:
    """Tests for bilingual messages."""

    def test_empty_state_depends_on_query(self) -> None:
        """Test the search and category empty states."""
        assert empty_state_message("en", "xyz") == "No items match your search"
        assert empty_state_message("en", "") == "No items found in this category"
        assert empty_state_message("cn", "xyz") == "没有找到匹配的菜品"
        assert empty_state_message("cn", "") == "此类别中没有项目"

    def test_not_found_message(self) -> None:
        assert message("product_not_found", "cn") == "未找到产品"
        assert message("back_to_menu", "en") == "Back to Menu"
