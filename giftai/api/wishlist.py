# api/wishlist.py
"""
/wishlist HTTP API Endpoints

POST /api/wishlist - Save a gift to a session wishlist
GET /api/wishlist/{session_id} - Wishlist of a session
DELETE /api/wishlist/{item_id} - Remove a saved gift
POST /api/wishlist/share - Create a share link for a session wishlist
GET /api/wishlist/shared/{token} - Open a shared wishlist
"""

from typing import List, Dict, Any
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.exc import SQLAlchemyError
from loguru import logger

from giftai.agents.session_assembler import enrich
from giftai.api.deps import get_storage
from giftai.interfaces.storage import GiftStorage
from giftai.schemas.gift_schemas import WishlistCreate, ShareCreate
from giftai.schemas.tables import WishlistItem


router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


# ============================================
# Helper Functions
# ============================================

def _enrich_item(storage: GiftStorage, item: WishlistItem) -> Dict[str, Any]:
    product = storage.get_product(item.product_id) if item.product_id else None
    recommendation = storage.get_recommendation(item.recommendation_id) if item.recommendation_id else None
    data = item.to_dict()
    data["product"] = product.to_dict() if product else None
    data["recommendation"] = enrich(recommendation, product) if recommendation else None
    return data


# ============================================
# Wishlist
# ============================================

@router.post("", response_model=Dict[str, Any])
async def add_to_wishlist(
    request: WishlistCreate,
    storage: GiftStorage = Depends(get_storage)
):
    product_id = request.productId
    if request.recommendationId:
        recommendation = storage.get_recommendation(request.recommendationId)
        if recommendation is None:
            raise HTTPException(status_code=404, detail="Recommendation not found")
        product_id = product_id or recommendation.product_id

    if product_id and storage.get_product(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    if not product_id:
        raise HTTPException(status_code=400, detail="Either recommendationId or productId is required")

    try:
        item = storage.add_to_wishlist(WishlistItem(
            session_id=request.sessionId,
            recommendation_id=request.recommendationId,
            product_id=product_id,
            notes=request.notes,
        ))
    except SQLAlchemyError as e:
        logger.error(f"Failed to add to wishlist: {e}")
        raise HTTPException(status_code=500, detail="Failed to add to wishlist")

    logger.info(f"Wishlist item {item.id} added for session {request.sessionId}")
    return _enrich_item(storage, item)


@router.post("/share", response_model=Dict[str, Any])
async def share_wishlist(
    request: ShareCreate,
    storage: GiftStorage = Depends(get_storage)
):
    try:
        shared = storage.create_shared_wishlist(
            session_id=request.sessionId,
            title=request.title or "My Gift Wishlist",
            description=request.description,
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to create shared wishlist: {e}")
        raise HTTPException(status_code=500, detail="Failed to create shared wishlist")
    return shared.to_dict()


@router.get("/shared/{token}", response_model=Dict[str, Any])
async def get_shared_wishlist(
    token: str,
    storage: GiftStorage = Depends(get_storage)
):
    shared = storage.get_shared_wishlist(token)
    if shared is None:
        raise HTTPException(status_code=404, detail="Shared wishlist not found")

    shared = storage.increment_view_count(shared.id) or shared
    data = shared.to_dict()
    data["items"] = [_enrich_item(storage, item) for item in storage.get_wishlist_by_session(shared.session_id)]
    return data


@router.get("/{session_id}", response_model=List[Dict[str, Any]])
async def get_wishlist(
    session_id: str,
    storage: GiftStorage = Depends(get_storage)
):
    return [_enrich_item(storage, item) for item in storage.get_wishlist_by_session(session_id)]


@router.delete("/{item_id}")
async def remove_from_wishlist(
    item_id: str,
    storage: GiftStorage = Depends(get_storage)
):
    if not storage.remove_from_wishlist(item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    return {"success": True}
