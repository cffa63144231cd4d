"""
Algorithms Module
Relevance scoring of catalog products against a gift-finder request
"""

from .relevance_scorer import (
    calculate_relevance_score,
    score,
    get_match_quality,
    RelevanceScoreBreakdown,
    BUDGET_BUCKETS,
)

__all__ = [
    "calculate_relevance_score",
    "score",
    "get_match_quality",
    "RelevanceScoreBreakdown",
    "BUDGET_BUCKETS",
]
