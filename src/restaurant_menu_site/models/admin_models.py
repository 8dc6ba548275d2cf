"""Admin editing and session models.

These models back the admin row editor: the per-row edit buffer, the
transient per-row status indicator, and the authenticated session issued by
the data service.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from restaurant_menu_site.models.menu_models import MenuRow

EditableField = Literal["image_urls", "is_available"]

IMAGE_URL_SEPARATOR = ", "


class RowStatusEnum(str, Enum):
    """Transient outcome indicator shown next to a row after a commit."""

    SUCCESS = "success"
    ERROR = "error"


def parse_image_urls(raw: str) -> list[str]:
    """Parse the comma-delimited image field into an ordered list.

    Pieces are trimmed and blank pieces dropped, so ``"a, ,b,"`` yields
    ``["a", "b"]`` and a blank string yields ``[]``.

    Args:
        raw: Text as typed into the admin image field

    Returns:
        Ordered list of image references
    """
    return [piece.strip() for piece in raw.split(",") if piece.strip()]


def serialize_image_urls(urls: list[str] | None) -> str:
    """Join image references into the editable comma-delimited form."""
    return IMAGE_URL_SEPARATOR.join(urls or [])


class AdminRowEdit(BaseModel):
    """Editable staging copy of a row's mutable fields."""

    model_config = ConfigDict(frozen=True)

    image_urls: str = Field(default="", description="Comma-delimited image references")
    is_available: bool = Field(..., description="Availability flag")

    @classmethod
    def from_row(cls, row: MenuRow) -> "AdminRowEdit":
        """Seed a buffer from the row's persisted values."""
        return cls(image_urls=serialize_image_urls(row.image_urls), is_available=row.is_available)

    def with_field(self, field: EditableField, value: str | bool) -> "AdminRowEdit":
        """Return a copy with one field replaced.

        Raises:
            ValueError: If the field is unknown or the value has the wrong type
        """
        if field not in ("image_urls", "is_available"):
            raise ValueError(f"Field '{field}' is not editable")
        return AdminRowEdit.model_validate({**self.model_dump(), field: value})

    def differs_from(self, row: MenuRow) -> bool:
        """Whether this buffer differs from the row's persisted values."""
        if self.is_available != row.is_available:
            return True
        return parse_image_urls(self.image_urls) != (row.image_urls or [])


class AuthSession(BaseModel):
    """Session issued by the data service's password sign-in."""

    access_token: str = Field(..., description="Bearer token for authenticated requests")
    refresh_token: str | None = Field(None, description="Token used to renew the session")
    user_email: str | None = Field(None, description="Email of the signed-in user")
