# agents/recommender.py
"""
Gift Recommender
Runs the generation tiers in order (AI, then rules) and returns the first
tier that produced candidates.
"""

from typing import List, Optional
from loguru import logger

from giftai.agents.ai_generator import AIRecommendationGenerator
from giftai.agents.candidates import TierResult
from giftai.agents.rule_based_generator import RuleBasedGenerator


class GiftRecommender:
    """Tier chain over the AI and rule-based generators"""

    def __init__(self, ai_generator: AIRecommendationGenerator, rule_generator: RuleBasedGenerator):
        self.ai_generator = ai_generator
        self.rule_generator = rule_generator

    async def recommend(self, request, exclude_names: Optional[List[str]] = None) -> TierResult:
        """
        Returns:
            TierResult: the serving tier's result, or the last failure
        """
        exclude_names = list(exclude_names or [])

        result = await self.ai_generator.generate(request, exclude_names)
        if result.ok:
            logger.info(f"Serving tier: {result.tier} ({len(result.candidates)} candidates)")
            return result

        logger.info(f"AI tier unavailable ({result.error}), falling back to rules")
        result = await self.rule_generator.generate_fallback(request, exclude_names)
        if result.ok:
            logger.info(f"Serving tier: {result.tier} ({len(result.candidates)} candidates)")
        else:
            logger.warning(f"All tiers failed, last error: {result.error}")
        return result

    async def fallback(self, request, exclude_names: Optional[List[str]] = None, max_phrases: int = None) -> TierResult:
        """Rule tier only, used when refinement cannot reach the LLM"""
        return await self.rule_generator.generate_fallback(request, exclude_names, max_phrases=max_phrases)
