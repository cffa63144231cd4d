"""
Relevance Score Algorithm
Calculates how well a catalog product matches a gift-finder request (0-100)

Algorithm Components:
1. Interest Overlap (40) - Share of requested interests the product is tagged with
2. Occasion Match (20) - Product is tagged for the requested occasion
3. Relationship Match (20) - Product is tagged for the requested relationship
4. Budget Fit (20) - Product price range inside (20) or overlapping (10) the bucket

Total: 0-100, rounded once at the end
"""

import re
from typing import NamedTuple, List, Optional, Tuple, Any
from loguru import logger


# ============================================
# Budget Buckets
# ============================================

# (min, max) in rupees; None means open-ended
BUDGET_BUCKETS = {
    "Under ₹500": (0, 500),
    "₹500-₹2000": (500, 2000),
    "₹2000-₹5000": (2000, 5000),
    "₹5000-₹10000": (5000, 10000),
    "₹10000+": (10000, None),
}

DEFAULT_BUDGET = "₹500-₹2000"

_DASHES = re.compile(r"\s*[-–—]\s*")
_SPACES = re.compile(r"\s+")


def normalize_budget_label(label: str) -> str:
    """
    Fold dash variants and spacing onto the canonical bucket label.

    Example:
        >>> normalize_budget_label("₹500 – ₹2000")
        '₹500-₹2000'
        >>> normalize_budget_label("under ₹500")
        'Under ₹500'
    """
    if not label:
        return ""
    cleaned = _SPACES.sub(" ", label.strip())
    cleaned = _DASHES.sub("-", cleaned)
    cleaned = cleaned.replace(" +", "+")
    if cleaned.lower().startswith("under"):
        cleaned = "Under" + cleaned[5:]
    return cleaned


def budget_range(label: str) -> Optional[Tuple[int, Optional[int]]]:
    """Numeric (min, max) for a bucket label, None for unknown labels"""
    return BUDGET_BUCKETS.get(normalize_budget_label(label))


def is_known_budget(label: str) -> bool:
    return budget_range(label) is not None


def price_within(price_min: float, price_max: float, bucket: Tuple[int, Optional[int]]) -> bool:
    low, high = bucket
    return price_min >= low and (high is None or price_max <= high)


def price_overlaps(price_min: float, price_max: float, bucket: Tuple[int, Optional[int]]) -> bool:
    low, high = bucket
    return price_max >= low and (high is None or price_min <= high)


def is_budget_compatible(label: str, price_min: float, price_max: float) -> bool:
    """
    True when the product price range overlaps the bucket.
    Unknown labels accept everything.
    """
    bucket = budget_range(label)
    if bucket is None:
        return True
    return price_overlaps(price_min, price_max, bucket)


# ============================================
# Relevance Score
# ============================================

class RelevanceScoreBreakdown(NamedTuple):
    """
    Breakdown of relevance score components
    """
    interest_score: float         # 0-40
    occasion_score: int           # 0 or 20
    relationship_score: int       # 0 or 20
    budget_score: int             # 0, 10 or 20
    total_score: int              # 0-100

    def __repr__(self) -> str:
        return (
            f"RelevanceScore(total={self.total_score}, "
            f"interest={self.interest_score:.1f}, "
            f"occasion={self.occasion_score}, "
            f"relationship={self.relationship_score}, "
            f"budget={self.budget_score})"
        )


def calculate_relevance_score(
    interests: List[str],
    occasion: str,
    relationship: str,
    budget: str,
    product_interests: List[str],
    product_occasions: List[str],
    product_relationships: Optional[List[str]],
    price_min: float,
    price_max: float
) -> RelevanceScoreBreakdown:
    """
    Calculate how relevant a product is for a recipient

    Args:
        interests: Requested interests
        occasion: Requested occasion
        relationship: Requested relationship
        budget: Budget bucket label
        product_interests: Interest tags of the product
        product_occasions: Occasion tags of the product
        product_relationships: Relationship tags (None = untagged)
        price_min: Lowest product price in rupees
        price_max: Highest product price in rupees

    Returns:
        RelevanceScoreBreakdown: Detailed score breakdown

    Example:
        >>> s = calculate_relevance_score(
        ...     interests=["Cricket", "Fitness"],
        ...     occasion="Birthday",
        ...     relationship="friend",
        ...     budget="₹500-₹2000",
        ...     product_interests=["Cricket"],
        ...     product_occasions=["Birthday"],
        ...     product_relationships=["friend", "family"],
        ...     price_min=800,
        ...     price_max=1500,
        ... )
        >>> s.total_score
        80
    """
    # ============================================
    # 1. Interest Overlap (0-40)
    # ============================================
    product_interest_set = set(product_interests or [])
    matching = [i for i in interests if i in product_interest_set]
    interest_score = (len(matching) / max(len(interests), 1)) * 40

    # ============================================
    # 2. Occasion Match (0 or 20)
    # ============================================
    occasion_score = 20 if occasion in (product_occasions or []) else 0

    # ============================================
    # 3. Relationship Match (0 or 20)
    # ============================================
    relationship_score = 0
    if product_relationships and relationship in product_relationships:
        relationship_score = 20

    # ============================================
    # 4. Budget Fit (0, 10 or 20)
    # ============================================
    budget_score = _calculate_budget_fit(budget, price_min, price_max)

    total = min(round(interest_score + occasion_score + relationship_score + budget_score), 100)

    breakdown = RelevanceScoreBreakdown(
        interest_score=interest_score,
        occasion_score=occasion_score,
        relationship_score=relationship_score,
        budget_score=budget_score,
        total_score=int(total)
    )

    logger.debug(f"Relevance score calculated: {breakdown}")

    return breakdown


def _calculate_budget_fit(budget: str, price_min: float, price_max: float) -> int:
    """
    Calculate budget fit score

    Logic:
    - Price range entirely inside the bucket: 20
    - Price range overlaps the bucket: 10
    - Disjoint or unknown bucket label: 0
    """
    bucket = budget_range(budget)
    if bucket is None:
        return 0

    if price_within(price_min, price_max, bucket):
        return 20
    if price_overlaps(price_min, price_max, bucket):
        return 10
    return 0


def score(request: Any, product: Any) -> int:
    """
    Score a catalog product against a gift-finder request.

    Works with any objects exposing the request fields (interests, occasion,
    relationship, budget) and the product fields (interests, occasions,
    relationships, price_min, price_max).
    """
    return calculate_relevance_score(
        interests=list(request.interests or []),
        occasion=request.occasion,
        relationship=request.relationship,
        budget=request.budget,
        product_interests=list(product.interests or []),
        product_occasions=list(product.occasions or []),
        product_relationships=product.relationships,
        price_min=product.price_min,
        price_max=product.price_max,
    ).total_score


def get_match_quality(relevance: int) -> str:
    """
    Human-readable description of a relevance score

    Example:
        >>> get_match_quality(85)
        'Perfect Match'
    """
    if relevance >= 80:
        return "Perfect Match"
    elif relevance >= 60:
        return "Great Match"
    elif relevance >= 40:
        return "Good Match"
    else:
        return "Possible Match"
