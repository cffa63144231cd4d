# schemas/gift_schemas.py
"""
Pydantic v2 schemas for the GiftAI API
Request validation happens here, before any external call is made
"""

from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from enum import Enum
from pydantic import BaseModel, Field, field_validator

from giftai.algorithms.relevance_scorer import (
    BUDGET_BUCKETS,
    DEFAULT_BUDGET,
    normalize_budget_label,
)


# ============================================
# Enums
# ============================================

class GenerationTier(str, Enum):
    AI = "ai"
    RULES = "rules"
    CATALOG = "catalog"
    REFINE = "refine"


class ProductSource(str, Enum):
    CATALOG = "catalog"
    SEARCH = "search"


# ============================================
# Gift Finder Request
# ============================================

class GiftFinderRequest(BaseModel):
    """Recipient profile submitted by the gift finder"""
    recipientName: Optional[str] = Field(None, max_length=100)
    recipientAge: Optional[int] = Field(None, ge=0, le=120)
    relationship: str = Field(..., min_length=1, max_length=100)
    interests: List[str] = Field(..., min_length=1, max_length=20)
    personality: Optional[str] = Field(None, max_length=500)
    budget: str = Field(..., description="One of the budget bucket labels")
    occasion: str = Field(..., min_length=1, max_length=100)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "recipientName": "Rahul",
                "recipientAge": 27,
                "relationship": "friend",
                "interests": ["Cricket"],
                "budget": "₹500-₹2000",
                "occasion": "Birthday"
            }
        }
    }

    @field_validator("relationship", "occasion")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("interests")
    @classmethod
    def _clean_interests(cls, value: List[str]) -> List[str]:
        cleaned = [v.strip() for v in value if v and v.strip()]
        if not cleaned:
            raise ValueError("at least one interest is required")
        return cleaned

    @field_validator("budget")
    @classmethod
    def _canonical_budget(cls, value: str) -> str:
        label = normalize_budget_label(value)
        if label not in BUDGET_BUCKETS:
            raise ValueError(f"unknown budget bucket '{value}', expected one of {list(BUDGET_BUCKETS)}")
        return label

    def profile_lines(self) -> List[str]:
        """Non-empty profile facts, one per line, for prompts"""
        lines = []
        if self.recipientName:
            lines.append(f"Name: {self.recipientName}")
        if self.recipientAge:
            lines.append(f"Age: {self.recipientAge}")
        lines.append(f"Relationship: {self.relationship}")
        lines.append(f"Interests: {', '.join(self.interests)}")
        if self.personality:
            lines.append(f"Personality/Style: {self.personality}")
        lines.append(f"Budget: {self.budget}")
        lines.append(f"Occasion: {self.occasion}")
        return lines


# ============================================
# Recommendation Responses
# ============================================

class RecommendationsResponse(BaseModel):
    """A batch of recommendations for one session"""
    sessionId: str
    tier: Optional[str] = None
    recommendations: List[Dict[str, Any]] = Field(default_factory=list)


class RefineRequest(BaseModel):
    """Chat-style refinement of an existing session"""
    message: str = Field(..., min_length=1, max_length=1000)
    recipientName: Optional[str] = None
    recipientAge: Optional[int] = Field(None, ge=0, le=120)
    personality: Optional[str] = None


class RefineResponse(BaseModel):
    response: str
    newRecommendations: List[Dict[str, Any]] = Field(default_factory=list)


class MessageRequest(BaseModel):
    recommendationId: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    message: str
    recommendation: Dict[str, Any]


# ============================================
# Chat
# ============================================

class ConversationState(BaseModel):
    """Recipient facts accumulated across chat turns"""
    recipientName: Optional[str] = None
    recipientAge: Optional[int] = None
    relationship: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    personality: Optional[str] = None
    budget: Optional[str] = None
    occasion: Optional[str] = None


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    conversationState: ConversationState = Field(default_factory=ConversationState)


class ChatResponse(BaseModel):
    response: str
    conversationState: ConversationState
    readyToRecommend: bool = False
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


# ============================================
# Wishlist & Sharing
# ============================================

class WishlistCreate(BaseModel):
    sessionId: str = Field(..., min_length=1)
    recommendationId: Optional[str] = None
    productId: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)


class ShareCreate(BaseModel):
    sessionId: str = Field(..., min_length=1)
    title: str = "My Gift Wishlist"
    description: Optional[str] = None


# ============================================
# Health Check
# ============================================

class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    components: Dict[str, str]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = [
    "GenerationTier",
    "ProductSource",
    "GiftFinderRequest",
    "RecommendationsResponse",
    "RefineRequest",
    "RefineResponse",
    "MessageRequest",
    "MessageResponse",
    "ConversationState",
    "ChatRequest",
    "ChatResponse",
    "WishlistCreate",
    "ShareCreate",
    "HealthResponse",
    "DEFAULT_BUDGET",
]
