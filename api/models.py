"""
API request and response models for the game server REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py and
inventory/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire naming: login and inventory envelopes use camelCase keys (userId,
accessToken) because existing game clients read them that way; inventory
item rows keep their snake_case column names.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from inventory.models import InventoryItem

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/login."""

    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    """Successful login. accessToken goes in `Authorization: Bearer ...`."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    user_id: int
    username: str
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class InventoryItemResponse(BaseModel):
    """One item row in GET /api/inventory."""

    model_config = ConfigDict(frozen=True)

    item_name: str
    item_type: str
    quantity: int
    properties: dict = Field(default_factory=dict)

    @classmethod
    def from_item(cls, item: InventoryItem) -> "InventoryItemResponse":
        return cls(
            item_name=item.item_name,
            item_type=item.item_type,
            quantity=item.quantity,
            properties=item.properties,
        )


class InventoryResponse(BaseModel):
    """Response for GET /api/inventory."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    user_id: int
    username: Optional[str] = None
    inventory: list[InventoryItemResponse]


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
