"""
api/routes/inventory.py -- Read-only inventory lookup for the token holder.

Routes:
  GET /api/inventory -- items owned by the user named in the bearer token

The router-level dependency runs full token verification (signature and
expiry) before the handler executes. The handler then reads userId and
username through the token service's claim accessors; they are a projection
of an already-verified token, not a second check.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from api.limiter import limiter
from api.models import InventoryItemResponse, InventoryResponse
from auth.dependencies import get_current_identity, get_token_service
from inventory.store import InventoryStore

logger = logging.getLogger("gameserver.inventory")

# Auth policy:
# - GET /api/inventory: requires a valid bearer token
router = APIRouter(dependencies=[Depends(get_current_identity)])


@router.get("/inventory", response_model=InventoryResponse)
@limiter.limit("60/minute")
def get_inventory(request: Request) -> InventoryResponse:
    """Return the caller's inventory, ordered by item name.

    Response:
      userId     -- owner id taken from the token
      username   -- owner name taken from the token
      inventory  -- [{item_name, item_type, quantity, properties}]
    """
    tokens = get_token_service(request)
    header = request.headers.get("Authorization")
    user_id = tokens.get_user_id(header)
    if user_id is None:
        raise HTTPException(
            status_code=400,
            detail={"code": "user_id_missing", "message": "User ID not found in token."},
        )

    store: InventoryStore = request.app.state.inventory_store
    try:
        items = store.list_for_user(user_id)
    except SQLAlchemyError as exc:
        logger.exception("Inventory lookup failed for user_id=%d", user_id)
        raise HTTPException(
            status_code=500,
            detail={"code": "inventory_unavailable", "message": "Failed to retrieve inventory."},
        ) from exc

    return InventoryResponse(
        user_id=user_id,
        username=tokens.get_username(header),
        inventory=[InventoryItemResponse.from_item(i) for i in items],
    )
