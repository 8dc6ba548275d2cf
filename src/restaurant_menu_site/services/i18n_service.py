"""Language preference and bilingual UI messages."""

from typing import cast

from restaurant_menu_site.models.menu_models import Language

LANGUAGE_COOKIE = "selectedLanguage"
DEFAULT_LANGUAGE: Language = "en"

# One-year cookie lifetime
LANGUAGE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365

MESSAGES: dict[str, dict[Language, str]] = {
    "no_search_results": {"en": "No items match your search", "cn": "没有找到匹配的菜品"},
    "empty_category": {"en": "No items found in this category", "cn": "此类别中没有项目"},
    "product_not_found": {"en": "Product not found", "cn": "未找到产品"},
    "back_to_menu": {"en": "Back to Menu", "cn": "返回菜单"},
    "description": {"en": "Description", "cn": "描述"},
    "category": {"en": "Category", "cn": "类别"},
    "price": {"en": "Price", "cn": "价格"},
}


def resolve_language(raw: str | None) -> Language:
    """Read a stored preference, falling back to English for anything unknown."""
    if raw in ("en", "cn"):
        return cast(Language, raw)
    return DEFAULT_LANGUAGE


def toggle_language(language: Language) -> Language:
    return "cn" if language == "en" else "en"


def message(key: str, language: Language) -> str:
    return MESSAGES[key][language]


def empty_state_message(language: Language, query: str) -> str:
    """Message for an empty menu listing, depending on whether a search is active."""
    return message("no_search_results" if query else "empty_category", language)
