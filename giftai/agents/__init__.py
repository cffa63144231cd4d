# agents/__init__.py
"""
Recommendation Agents Package

- AIRecommendationGenerator: LLM suggestions + product search (primary tier)
- RuleBasedGenerator: Deterministic fallback tier
- GiftRecommender: Tier chain
- SessionAssembler: Session create / extend / refine / message
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ai_generator import AIRecommendationGenerator
    from .rule_based_generator import RuleBasedGenerator
    from .recommender import GiftRecommender
    from .session_assembler import SessionAssembler, SessionBatch

__all__ = [
    "AIRecommendationGenerator",
    "RuleBasedGenerator",
    "GiftRecommender",
    "SessionAssembler",
    "SessionBatch",
]
