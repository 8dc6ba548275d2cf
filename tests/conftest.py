"""Shared pytest fixtures and configuration for all tests."""

import os

import pytest

# Keeps src/main.py and src/lambda_handler.py from building the app at import
os.environ.setdefault("ENVIRONMENT", "test")

from restaurant_menu_site.models.menu_models import MenuRow  # noqa: E402


@pytest.fixture
def mock_row_data() -> list[dict]:
    """Raw data service records across two categories.

    The second record carries the only "ginger" ingredient text; the third has
    no images and no ingredients.
    """
    return [
        {
            "id": "item_1",
            "category_en": "Soup",
            "category_cn": "汤",
            "name_en": "Hot and Sour Soup",
            "name_cn": "酸辣汤",
            "price": "6.50",
            "image_urls": ["https://cdn.example.com/soup-1.jpg", "https://cdn.example.com/soup-2.jpg"],
            "ingredients_en": "Tofu, bamboo shoots, egg",
            "ingredients_cn": "豆腐，竹笋，鸡蛋",
            "is_available": True,
            "display_order": 1,
        },
        {
            "id": "item_2",
            "category_en": "Appetisers",
            "category_cn": "开胃菜",
            "name_en": "Crispy Squid",
            "name_cn": "椒盐鱿鱼",
            "price": "9.80",
            "image_urls": ["https://cdn.example.com/squid.jpg"],
            "ingredients_en": "Squid, Ginger, spring onion",
            "ingredients_cn": "鱿鱼，姜，葱",
            "is_available": True,
            "display_order": 2,
        },
        {
            "id": "item_3",
            "category_en": "Soup",
            "category_cn": "汤",
            "name_en": "Wonton Soup",
            "name_cn": "云吞汤",
            "price": "7.20",
            "image_urls": None,
            "ingredients_en": None,
            "ingredients_cn": None,
            "is_available": True,
            "display_order": 3,
        },
    ]


@pytest.fixture
def mock_rows(mock_row_data: list[dict]) -> list[MenuRow]:
    """The raw records parsed into MenuRow models."""
    return [MenuRow(**data) for data in mock_row_data]


@pytest.fixture
def mock_unavailable_row() -> MenuRow:
    """A row hidden from the public menu."""
    return MenuRow(
        id="item_9",
        category_en="Desserts",
        category_cn="甜品",
        name_en="Mango Pudding",
        name_cn="芒果布丁",
        price="5.00",
        image_urls=["https://cdn.example.com/pudding.jpg"],
        is_available=False,
        display_order=9,
    )
