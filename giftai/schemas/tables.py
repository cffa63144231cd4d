# schemas/tables.py
"""
SQLModel tables for the persistence layer

- gift_products: curated catalog items and minimal records for search results
- gift_recommendations: (session, product) pairings with reasoning and score
- session_requests: the immutable request facts of a session
- wishlist_items / shared_wishlists: saved gifts and their share links
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GiftProduct(SQLModel, table=True):
    __tablename__ = "gift_products"

    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str = Field(index=True)
    description: str = ""
    category: str = ""
    price_min: int = 0  # rupees
    price_max: int = 0
    interests: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    occasions: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    relationships: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    personality: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    age_group: Optional[str] = None
    image_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # "catalog" for curated items, "search" for marketplace results
    source: str = Field(default="catalog", index=True)

    # Curated catalog link
    affiliate_link: Optional[str] = None

    # Marketplace facts of search-sourced items
    marketplace: Optional[str] = None
    source_url: Optional[str] = None
    external_id: Optional[str] = None
    display_price: Optional[str] = None
    currency: Optional[str] = None
    rating: Optional[float] = None
    rating_count: Optional[int] = None
    is_prime: bool = False
    is_best_seller: bool = False
    is_featured: bool = False

    @property
    def purchase_url(self) -> Optional[str]:
        return self.source_url or self.affiliate_link

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "priceMin": self.price_min,
            "priceMax": self.price_max,
            "interests": list(self.interests or []),
            "occasions": list(self.occasions or []),
            "relationships": list(self.relationships) if self.relationships else None,
            "ageGroup": self.age_group,
            "imageUrl": self.image_url,
            "tags": list(self.tags or []),
            "source": self.source,
            "affiliateLink": self.affiliate_link,
            "marketplace": self.marketplace,
            "sourceUrl": self.source_url,
            "purchaseUrl": self.purchase_url,
            "displayPrice": self.display_price or (f"₹{self.price_min}" if self.price_min > 0 else None),
            "currency": self.currency,
            "rating": self.rating,
            "ratingCount": self.rating_count,
            "isPrime": self.is_prime,
            "isBestSeller": self.is_best_seller,
            "isFeatured": self.is_featured,
        }


class GiftRecommendation(SQLModel, table=True):
    __tablename__ = "gift_recommendations"

    id: str = Field(default_factory=_new_id, primary_key=True)
    session_id: str = Field(index=True)
    recipient_name: Optional[str] = None
    recipient_age: Optional[int] = None
    relationship: Optional[str] = None
    interests: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    personality: Optional[str] = None
    budget: Optional[str] = None
    occasion: Optional[str] = None
    product_id: Optional[str] = Field(default=None, foreign_key="gift_products.id")
    ai_reasoning: Optional[str] = None
    personalized_message: Optional[str] = None
    relevance_score: Optional[int] = None
    generation_tier: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "recipientName": self.recipient_name,
            "recipientAge": self.recipient_age,
            "relationship": self.relationship,
            "interests": list(self.interests or []),
            "personality": self.personality,
            "budget": self.budget,
            "occasion": self.occasion,
            "productId": self.product_id,
            "aiReasoning": self.ai_reasoning,
            "personalizedMessage": self.personalized_message,
            "relevanceScore": self.relevance_score,
            "generationTier": self.generation_tier,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class SessionRequest(SQLModel, table=True):
    """Request facts of a session, written once when the session is created"""
    __tablename__ = "session_requests"

    session_id: str = Field(primary_key=True)
    recipient_name: Optional[str] = None
    recipient_age: Optional[int] = None
    relationship: str
    interests: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    personality: Optional[str] = None
    budget: str
    occasion: str
    created_at: datetime = Field(default_factory=_utcnow)


class WishlistItem(SQLModel, table=True):
    __tablename__ = "wishlist_items"

    id: str = Field(default_factory=_new_id, primary_key=True)
    session_id: str = Field(index=True)
    recommendation_id: Optional[str] = Field(default=None, foreign_key="gift_recommendations.id")
    product_id: Optional[str] = Field(default=None, foreign_key="gift_products.id")
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "recommendationId": self.recommendation_id,
            "productId": self.product_id,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class SharedWishlist(SQLModel, table=True):
    __tablename__ = "shared_wishlists"

    id: str = Field(default_factory=_new_id, primary_key=True)
    share_token: str = Field(index=True, unique=True)
    session_id: str = Field(index=True)
    title: str = "My Gift Wishlist"
    description: Optional[str] = None
    view_count: int = 0
    created_at: datetime = Field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "shareToken": self.share_token,
            "sessionId": self.session_id,
            "title": self.title,
            "description": self.description,
            "viewCount": self.view_count,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
