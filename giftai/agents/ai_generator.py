# agents/ai_generator.py
"""
AI-Augmented Recommendation Generator
Primary tier: the LLM proposes interest-specific search phrases, the product
search turns each phrase into a real purchasable item.

Also picks products from the curated catalog for "load more".
"""

import json
from typing import List, Optional, Dict, Any, Sequence, Tuple
from loguru import logger

from giftai.agents.candidates import ScoredCandidate, TierResult, StructuredPick, clamp_score
from giftai.algorithms.relevance_scorer import score, get_match_quality
from giftai.config import settings
from giftai.errors import SuggestionServiceError, ProductSearchError
from giftai.interfaces.product_search import ProductSearchClient, is_excluded
from giftai.interfaces.rate_limiter import RateLimiter, NoopRateLimiter
from giftai.llm.client import LLMClient
from giftai.llm.prompts import (
    SUGGESTION_SYSTEM_PROMPT,
    SUGGESTION_PROMPT,
    REFINE_SYSTEM_PROMPT,
    REFINE_PROMPT,
    CATALOG_SYSTEM_PROMPT,
    CATALOG_PROMPT,
)
from giftai.schemas.gift_schemas import GenerationTier


RESULTS_PER_SUGGESTION = 3
RESULTS_PER_REFINEMENT = 2
MAX_REFINEMENTS = 4
MAX_STRUCTURED_PICKS = 8


def format_excluded(exclude_names: Sequence[str]) -> str:
    names = [n for n in exclude_names if n]
    if not names:
        return "(none)"
    return "\n".join(f"- {n}" for n in names)


def parse_suggestions(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Keep well-formed suggestions, in order"""
    raw = data.get("suggestions")
    if not isinstance(raw, list):
        return []
    suggestions = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        phrase = str(item.get("searchPhrase") or "").strip()
        if not phrase:
            continue
        suggestions.append({
            "searchPhrase": phrase,
            "reasoning": str(item.get("reasoning") or "").strip(),
            "relevanceScore": clamp_score(item.get("relevanceScore", 80)),
            "category": item.get("category"),
        })
    return suggestions


class AIRecommendationGenerator:
    """
    LLM + product search tier

    Every failure mode (no key, timeout, malformed output, nothing found)
    comes back as a failed TierResult so the caller can fall through.
    """

    def __init__(
        self,
        llm: LLMClient,
        search_client: ProductSearchClient,
        rate_limiter: Optional[RateLimiter] = None,
        country: Optional[str] = None
    ):
        self.llm = llm
        self.search_client = search_client
        self.rate_limiter = rate_limiter or NoopRateLimiter()
        self.country = country or settings.SEARCH_COUNTRY

    # ============================================
    # Suggestions + Search
    # ============================================

    async def generate(self, request, exclude_names: Optional[List[str]] = None) -> TierResult:
        """
        Generate recommendations from LLM suggestions and product search

        Args:
            request: GiftFinderRequest-like object
            exclude_names: Titles already shown in the session

        Returns:
            TierResult: candidates in suggestion order
        """
        tier = GenerationTier.AI.value
        if not self.llm.enabled:
            logger.info("AI generator skipped: no API key configured")
            return TierResult.failed(tier, "LLM API key is not configured")

        excluded = list(exclude_names or [])
        user_prompt = SUGGESTION_PROMPT.format(
            profile="\n".join(request.profile_lines()),
            excluded=format_excluded(excluded),
        )

        try:
            data = await self.llm.complete_json(
                SUGGESTION_SYSTEM_PROMPT,
                user_prompt,
                timeout=settings.SUGGESTION_TIMEOUT,
            )
        except SuggestionServiceError as e:
            logger.warning(f"AI suggestion call failed: {e}")
            return TierResult.failed(tier, str(e))

        suggestions = parse_suggestions(data)
        if not suggestions:
            logger.warning("AI suggestion call returned no usable suggestions")
            return TierResult.failed(tier, "empty suggestion list")

        logger.info(f"AI generator: {len(suggestions)} suggestions to search")

        candidates: List[ScoredCandidate] = []
        for suggestion in suggestions:
            phrase = suggestion["searchPhrase"]
            await self.rate_limiter.acquire()
            try:
                results = await self.search_client.search(
                    phrase, max_results=RESULTS_PER_SUGGESTION, country=self.country
                )
            except ProductSearchError as e:
                logger.warning(f"Search failed for suggestion '{phrase}': {e}")
                continue

            product = next((r for r in results if not is_excluded(r.title, excluded)), None)
            if product is None:
                continue

            candidates.append(ScoredCandidate(
                product=product,
                reasoning=suggestion["reasoning"] or f"A great match for their love of {phrase}.",
                relevance_score=suggestion["relevanceScore"],
                tier=tier,
                search_phrase=phrase,
                category=suggestion["category"],
            ))
            excluded.append(product.title)

        if not candidates:
            logger.warning("AI suggestions produced no products")
            return TierResult.failed(tier, "no products found for any suggestion")

        logger.info(f"AI generator produced {len(candidates)} candidates")
        return TierResult(tier=tier, candidates=candidates)

    # ============================================
    # Refinement
    # ============================================

    async def generate_refinement(
        self,
        message: str,
        request,
        exclude_names: Optional[List[str]] = None
    ) -> Tuple[Optional[str], TierResult]:
        """
        Turn a free-text refinement ("something cheaper") into 2-4 new products

        Returns:
            (acknowledgement, TierResult): acknowledgement is None on failure
        """
        tier = GenerationTier.REFINE.value
        if not self.llm.enabled:
            return None, TierResult.failed(tier, "LLM API key is not configured")

        excluded = list(exclude_names or [])
        try:
            data = await self.llm.complete_json(
                REFINE_SYSTEM_PROMPT,
                REFINE_PROMPT.format(
                    message=message,
                    profile="\n".join(request.profile_lines()),
                    excluded=format_excluded(excluded),
                ),
                timeout=settings.SUGGESTION_TIMEOUT,
            )
        except SuggestionServiceError as e:
            logger.warning(f"Refinement call failed: {e}")
            return None, TierResult.failed(tier, str(e))

        acknowledgement = str(data.get("response") or "").strip() or "Let me find some new options for you!"
        raw = data.get("suggestions")
        suggestions = [
            {**s, "searchPhrase": str(s.get("searchQuery") or s.get("searchPhrase") or "").strip()}
            for s in (raw if isinstance(raw, list) else [])
            if isinstance(s, dict)
        ]
        suggestions = parse_suggestions({"suggestions": suggestions})[:MAX_REFINEMENTS]

        candidates: List[ScoredCandidate] = []
        for suggestion in suggestions:
            phrase = suggestion["searchPhrase"]
            await self.rate_limiter.acquire()
            try:
                results = await self.search_client.search(
                    phrase, max_results=RESULTS_PER_REFINEMENT, country=self.country
                )
            except ProductSearchError as e:
                logger.warning(f"Refinement search failed for '{phrase}': {e}")
                continue

            product = next((r for r in results if not is_excluded(r.title, excluded)), None)
            if product is None:
                continue
            candidates.append(ScoredCandidate(
                product=product,
                reasoning=suggestion["reasoning"] or f"Matches your request: {message}",
                relevance_score=suggestion["relevanceScore"],
                tier=tier,
                search_phrase=phrase,
                category=suggestion["category"],
            ))
            excluded.append(product.title)

        if not candidates:
            return acknowledgement, TierResult.failed(tier, "no products found for refinement")
        return acknowledgement, TierResult(tier=tier, candidates=candidates)

    # ============================================
    # Catalog Picks ("load more")
    # ============================================

    async def generate_structured(self, request, catalog: Sequence[Any]) -> List[StructuredPick]:
        """
        Ask the LLM to choose 5-8 products from a catalog

        Unknown product ids are discarded. Any failure falls back to the
        relevance scorer: highest first, top 8, templated reasoning.
        """
        if not catalog:
            return []

        by_id = {p.id: p for p in catalog}

        if self.llm.enabled:
            try:
                picks = await self._llm_picks(request, catalog, by_id)
                if picks:
                    return picks
                logger.warning("Catalog picker returned no known products, using scorer")
            except SuggestionServiceError as e:
                logger.warning(f"Catalog picker failed, using scorer: {e}")

        return self._scored_picks(request, catalog)

    async def _llm_picks(self, request, catalog: Sequence[Any], by_id: Dict[str, Any]) -> List[StructuredPick]:
        catalog_json = json.dumps([
            {
                "id": p.id,
                "name": p.name,
                "description": p.description,
                "category": p.category,
                "priceRange": f"₹{p.price_min}-₹{p.price_max}",
                "interests": list(p.interests or []),
                "occasions": list(p.occasions or []),
                "tags": list(p.tags or []),
            }
            for p in catalog
        ], ensure_ascii=False)

        data = await self.llm.complete_json(
            CATALOG_SYSTEM_PROMPT,
            CATALOG_PROMPT.format(profile="\n".join(request.profile_lines()), catalog=catalog_json),
            timeout=settings.SUGGESTION_TIMEOUT,
        )

        raw = data.get("recommendations")
        if not isinstance(raw, list):
            raise SuggestionServiceError("catalog picker response has no recommendations list")

        picks: List[StructuredPick] = []
        seen = set()
        for item in raw:
            if not isinstance(item, dict):
                continue
            product_id = item.get("productId")
            if not isinstance(product_id, str) or product_id not in by_id:
                logger.debug(f"Catalog picker returned unknown product id {product_id!r}")
                continue
            if product_id in seen:
                continue
            seen.add(product_id)
            picks.append(StructuredPick(
                product_id=product_id,
                reasoning=str(item.get("reasoning") or "").strip()
                or self._template_reasoning(request, by_id[product_id]),
                relevance_score=clamp_score(item.get("relevanceScore")),
            ))
            if len(picks) >= MAX_STRUCTURED_PICKS:
                break
        return picks

    def _scored_picks(self, request, catalog: Sequence[Any]) -> List[StructuredPick]:
        ranked = sorted(catalog, key=lambda p: score(request, p), reverse=True)[:MAX_STRUCTURED_PICKS]
        return [
            StructuredPick(
                product_id=p.id,
                reasoning=self._template_reasoning(request, p),
                relevance_score=clamp_score(score(request, p), low=0),
            )
            for p in ranked
        ]

    @staticmethod
    def _template_reasoning(request, product) -> str:
        quality = get_match_quality(score(request, product))
        interests = ", ".join(request.interests)
        return (
            f"{quality}: {product.name} suits someone who enjoys {interests} "
            f"and is a thoughtful choice for a {request.occasion.lower()}."
        )
