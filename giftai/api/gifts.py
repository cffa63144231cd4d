# api/gifts.py
"""
/gifts HTTP API Endpoints

GET /api/gifts - Browse products with category and price filters
GET /api/gifts/trending - Products ordered by wishlist saves
"""

from typing import Optional, List, Dict, Any
from fastapi import APIRouter, Query, Depends

from giftai.api.deps import get_storage
from giftai.interfaces.storage import GiftStorage


router = APIRouter(prefix="/api/gifts", tags=["gifts"])


@router.get("", response_model=List[Dict[str, Any]])
async def list_gifts(
    category: Optional[str] = Query(None, description="Exact category"),
    minPrice: Optional[int] = Query(None, ge=0, description="Products whose max price reaches this"),
    maxPrice: Optional[int] = Query(None, ge=0, description="Products whose min price is at most this"),
    storage: GiftStorage = Depends(get_storage)
):
    products = storage.list_products(category=category, min_price=minPrice, max_price=maxPrice)
    return [p.to_dict() for p in products]


@router.get("/trending", response_model=List[Dict[str, Any]])
async def trending_gifts(
    limit: int = Query(20, ge=1, le=100),
    storage: GiftStorage = Depends(get_storage)
):
    """
    Most-saved products first; ties keep catalog order so unsaved
    products still fill the list
    """
    counts = storage.wishlist_save_counts()
    products = storage.list_products()
    ranked = sorted(products, key=lambda p: counts.get(p.id, 0), reverse=True)
    result = []
    for product in ranked[:limit]:
        data = product.to_dict()
        data["saveCount"] = counts.get(product.id, 0)
        result.append(data)
    return result
