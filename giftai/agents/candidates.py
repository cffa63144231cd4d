# agents/candidates.py
"""
Value types passed between the generation tiers and the session assembler
"""

from dataclasses import dataclass, field
from typing import Optional, List

from giftai.interfaces.product_search import ProductSearchResult


@dataclass
class ScoredCandidate:
    """
    A product paired with the reasoning and score that justify recommending it.
    Search-sourced candidates carry `product`; catalog picks carry
    `catalog_product_id` instead.
    """
    reasoning: str
    relevance_score: int
    tier: str
    product: Optional[ProductSearchResult] = None
    catalog_product_id: Optional[str] = None
    search_phrase: Optional[str] = None
    category: Optional[str] = None

    @property
    def title(self) -> str:
        return self.product.title if self.product else ""


@dataclass
class TierResult:
    """Outcome of one generation tier; failures are values, not exceptions"""
    tier: str
    candidates: List[ScoredCandidate] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and len(self.candidates) > 0

    @classmethod
    def failed(cls, tier: str, error: str) -> "TierResult":
        return cls(tier=tier, candidates=[], error=error)


@dataclass
class StructuredPick:
    """A catalog product chosen for a session, with its justification"""
    product_id: str
    reasoning: str
    relevance_score: int


def clamp_score(value, low: int = 1, high: int = 100) -> int:
    """Coerce a collaborator-supplied score into [low, high]"""
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        return low
    return max(low, min(high, number))
