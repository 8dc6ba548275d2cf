"""Menu data models.

``MenuRow`` mirrors a record of the ``menu_items`` table in the hosted data
service. ``MenuItem`` is the display model the catalog works with: both
language variants of every label, a never-empty image list, and empty strings
instead of missing ingredient text.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Language = Literal["en", "cn"]

PLACEHOLDER_IMAGE = "/placeholder.svg"


class MenuRow(BaseModel):
    """Raw menu item record as stored in the data service."""

    model_config = ConfigDict(extra="ignore", json_encoders={Decimal: str})

    id: str = Field(..., description="Unique identifier for the menu item")
    category_en: str = Field(..., description="Category label in English")
    category_cn: str = Field(..., description="Category label in Chinese")
    name_en: str = Field(..., description="Item name in English")
    name_cn: str = Field(..., description="Item name in Chinese")
    price: Decimal = Field(..., description="Item price", ge=0)
    image_urls: list[str] | None = Field(None, description="Ordered image references")
    ingredients_en: str | None = Field(None, description="Ingredients text in English")
    ingredients_cn: str | None = Field(None, description="Ingredients text in Chinese")
    is_available: bool = Field(default=True, description="Whether item is shown on the menu")
    display_order: int = Field(default=0, description="Display rank, ascending")


class MenuItem(BaseModel):
    """Menu item as presented by the catalog."""

    model_config = ConfigDict(frozen=True, json_encoders={Decimal: str})

    id: str
    category_en: str
    category_cn: str
    name_en: str
    name_cn: str
    price: Decimal = Field(..., ge=0)
    images: tuple[str, ...] = Field(..., min_length=1)
    ingredients_en: str = ""
    ingredients_cn: str = ""

    @classmethod
    def from_row(cls, row: MenuRow) -> "MenuItem":
        """Build a display item from a data service row.

        Args:
            row: Raw record fetched from the data service

        Returns:
            MenuItem with the placeholder image substituted when the row has none
        """
        return cls(
            id=row.id,
            category_en=row.category_en,
            category_cn=row.category_cn,
            name_en=row.name_en,
            name_cn=row.name_cn,
            price=row.price,
            images=tuple(row.image_urls or [PLACEHOLDER_IMAGE]),
            ingredients_en=row.ingredients_en or "",
            ingredients_cn=row.ingredients_cn or "",
        )

    @property
    def display_price(self) -> str:
        """Price formatted for display, e.g. ``£12.80``."""
        return f"£{self.price:.2f}"

    def localized_name(self, language: Language) -> str:
        return self.name_en if language == "en" else self.name_cn

    def secondary_name(self, language: Language) -> str:
        """Name in the language that is not currently selected."""
        return self.name_cn if language == "en" else self.name_en

    def localized_category(self, language: Language) -> str:
        return self.category_en if language == "en" else self.category_cn

    def localized_ingredients(self, language: Language) -> str:
        return self.ingredients_en if language == "en" else self.ingredients_cn


class Category(BaseModel):
    """Menu category derived from the loaded items. Identity is ``en``."""

    model_config = ConfigDict(frozen=True)

    en: str = Field(..., description="Category label in English")
    cn: str = Field(..., description="Category label in Chinese")

    def label(self, language: Language) -> str:
        return self.en if language == "en" else self.cn


ALL_CATEGORY = Category(en="All", cn="全部")
