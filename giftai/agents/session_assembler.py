# agents/session_assembler.py
"""
Recommendation Session Assembler
Turns generated candidates into persisted, enriched recommendations and
serves the per-session operations:

- create_session: first batch through the tier chain, catalog as last resort
- extend_session: "load more", live results first, then the curated catalog
- refine_session: chat-driven refinement of an existing session
- regenerate_message: rewrite the card message of one recommendation

Each row is written in its own transaction; a failed write is logged and the
batch carries on.
"""

import uuid
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple, Set
from sqlalchemy.exc import SQLAlchemyError
from loguru import logger

from giftai.agents.ai_generator import AIRecommendationGenerator
from giftai.agents.candidates import ScoredCandidate, TierResult
from giftai.agents.recommender import GiftRecommender
from giftai.algorithms.relevance_scorer import DEFAULT_BUDGET, is_budget_compatible, score
from giftai.errors import (
    NoRecommendationsFound,
    SessionNotFound,
    SessionExhausted,
    RecommendationNotFound,
)
from giftai.interfaces.product_search import is_excluded
from giftai.interfaces.storage import GiftStorage
from giftai.llm.message_writer import PersonalizedMessageWriter
from giftai.schemas.gift_schemas import GiftFinderRequest, GenerationTier, ProductSource
from giftai.schemas.tables import GiftProduct, GiftRecommendation, SessionRequest


MIN_CATALOG_SCORE = 30
MAX_CATALOG_CANDIDATES = 30
MAX_EXTEND_PICKS = 8
MAX_REFINE_FALLBACK = 4


@dataclass
class SessionBatch:
    """One batch of persisted recommendations"""
    session_id: str
    tier: Optional[str]
    recommendations: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "tier": self.tier,
            "recommendations": self.recommendations,
        }


def enrich(recommendation: GiftRecommendation, product: Optional[GiftProduct]) -> Dict[str, Any]:
    """Recommendation + product (badges, display price, purchase URL) for the wire"""
    data = recommendation.to_dict()
    data["product"] = product.to_dict() if product else None
    return data


def _badge_tags(candidate: ScoredCandidate) -> List[str]:
    product = candidate.product
    tags = []
    if product.is_prime:
        tags.append("Prime")
    if product.is_best_seller:
        tags.append("Best Seller")
    if product.is_featured:
        tags.append("Featured")
    return tags


class SessionAssembler:
    """
    Session-level operations over the generation tiers and storage

    Usage:
        assembler = SessionAssembler(storage, recommender, ai_generator, message_writer)
        batch = await assembler.create_session(request)
        more = await assembler.extend_session(batch.session_id)
    """

    def __init__(
        self,
        storage: GiftStorage,
        recommender: GiftRecommender,
        ai_generator: AIRecommendationGenerator,
        message_writer: PersonalizedMessageWriter
    ):
        self.storage = storage
        self.recommender = recommender
        self.ai_generator = ai_generator
        self.message_writer = message_writer

    # ============================================
    # Create
    # ============================================

    async def create_session(self, request: GiftFinderRequest) -> SessionBatch:
        """
        Run the tier chain and persist the first batch of a new session.
        When neither live tier finds anything the curated catalog is ranked
        instead.

        Raises:
            NoRecommendationsFound: no tier produced a recommendation
        """
        result = await self.recommender.recommend(request, exclude_names=[])
        if not result.ok:
            logger.info(f"Live tiers found nothing ({result.error}), ranking the catalog")
            result = await self._catalog_tier(request, set(), [])
        if not result.ok:
            raise NoRecommendationsFound("We couldn't find suitable gifts for these criteria")

        session_id = str(uuid.uuid4())
        try:
            self.storage.save_session_request(SessionRequest(
                session_id=session_id,
                recipient_name=request.recipientName,
                recipient_age=request.recipientAge,
                relationship=request.relationship,
                interests=list(request.interests),
                personality=request.personality,
                budget=request.budget,
                occasion=request.occasion,
            ))
        except SQLAlchemyError as e:
            logger.error(f"Failed to save request facts for session {session_id}: {e}")

        recommendations = self._persist_candidates(session_id, request, result.candidates)
        if not recommendations:
            logger.error(f"Session {session_id}: none of {len(result.candidates)} candidates could be saved")
            raise NoRecommendationsFound("We couldn't find suitable gifts for these criteria")

        logger.info(
            f"Session {session_id} created with {len(recommendations)} recommendations "
            f"(tier={result.tier})"
        )
        return SessionBatch(session_id=session_id, tier=result.tier, recommendations=recommendations)

    # ============================================
    # Extend ("load more")
    # ============================================

    async def extend_session(self, session_id: str, request: Optional[GiftFinderRequest] = None) -> SessionBatch:
        """
        Add recommendations not yet shown in the session: fresh live results
        first, then up to 8 picks from the curated catalog

        Args:
            session_id: Existing session
            request: Optional caller request; only name, age and personality are used

        Raises:
            SessionNotFound: session has no recommendations
            SessionExhausted: nothing new left to recommend
        """
        existing = self.storage.get_recommendations_by_session(session_id)
        if not existing:
            raise SessionNotFound(f"Session {session_id} not found")

        facts = self._session_facts(session_id, existing, request)
        excluded_ids, excluded_names = self._exclusion_set(existing)

        result = await self.recommender.recommend(facts, exclude_names=excluded_names)
        if not result.ok:
            logger.info(f"Live tiers found nothing new ({result.error}), using the catalog")
            result = await self._catalog_tier(facts, excluded_ids, excluded_names)
        if not result.ok:
            logger.info(f"Session {session_id} exhausted: {result.error}")
            raise SessionExhausted("No more recommendations available for this session")

        recommendations = self._persist_candidates(session_id, facts, result.candidates)
        if not recommendations:
            logger.info(f"Session {session_id} exhausted: no new picks persisted")
            raise SessionExhausted("No more recommendations available for this session")

        logger.info(f"Session {session_id} extended with {len(recommendations)} recommendations (tier={result.tier})")
        return SessionBatch(session_id=session_id, tier=result.tier, recommendations=recommendations)

    async def _catalog_tier(
        self,
        facts: GiftFinderRequest,
        excluded_ids: Set[str],
        excluded_names: List[str]
    ) -> TierResult:
        """
        Budget-compatible, unseen catalog products scoring above 30, top 30
        by score, of which the LLM (or the scorer) picks up to 8
        """
        tier = GenerationTier.CATALOG.value
        catalog = [
            p for p in self.storage.list_products(source=ProductSource.CATALOG.value)
            if p.id not in excluded_ids
            and not is_excluded(p.name, excluded_names)
            and is_budget_compatible(facts.budget, p.price_min, p.price_max)
        ]
        scored = [(score(facts, p), p) for p in catalog]
        scored = [(s, p) for s, p in scored if s > MIN_CATALOG_SCORE]
        scored.sort(key=lambda item: item[0], reverse=True)
        candidates = [p for _, p in scored[:MAX_CATALOG_CANDIDATES]]
        if not candidates:
            return TierResult.failed(tier, "no catalog candidates left")

        by_id = {p.id: p for p in candidates}
        picks = await self.ai_generator.generate_structured(facts, candidates)

        chosen: List[ScoredCandidate] = []
        seen: Set[str] = set()
        for pick in picks[:MAX_EXTEND_PICKS]:
            product = by_id.get(pick.product_id)
            if product is None or pick.product_id in excluded_ids or pick.product_id in seen:
                continue
            seen.add(pick.product_id)
            chosen.append(ScoredCandidate(
                reasoning=pick.reasoning,
                relevance_score=pick.relevance_score,
                tier=tier,
                catalog_product_id=product.id,
                category=product.category,
            ))

        if not chosen:
            return TierResult.failed(tier, "no new catalog picks")
        return TierResult(tier=tier, candidates=chosen)

    # ============================================
    # Refine
    # ============================================

    async def refine_session(
        self,
        session_id: str,
        message: str,
        recipient_name: Optional[str] = None,
        recipient_age: Optional[int] = None,
        personality: Optional[str] = None
    ) -> Tuple[str, List[Dict[str, Any]]]:
        """
        Add 2-4 recommendations that follow a free-text refinement message

        Returns:
            (acknowledgement, new recommendations)

        Raises:
            SessionNotFound: session has no recommendations
        """
        existing = self.storage.get_recommendations_by_session(session_id)
        if not existing:
            raise SessionNotFound(f"Session {session_id} not found")

        overrides = {
            "recipientName": recipient_name,
            "recipientAge": recipient_age,
            "personality": personality,
        }
        facts = self._session_facts(session_id, existing, None, overrides)
        _, excluded_names = self._exclusion_set(existing)

        acknowledgement, result = await self.ai_generator.generate_refinement(message, facts, excluded_names)
        if not result.ok:
            logger.info(f"Refinement via LLM unavailable ({result.error}), using rule tier")
            result = await self.recommender.fallback(facts, excluded_names, max_phrases=MAX_REFINE_FALLBACK)

        if acknowledgement is None:
            acknowledgement = "Let me find some new options for you!"

        if not result.ok:
            return "I couldn't find anything new for that request. Could you try rephrasing?", []

        recommendations = self._persist_candidates(session_id, facts, result.candidates)
        return acknowledgement, recommendations

    # ============================================
    # Messages
    # ============================================

    async def regenerate_message(self, recommendation_id: str) -> Tuple[str, Dict[str, Any]]:
        """
        Write a fresh personalized message and overwrite the stored one

        Raises:
            RecommendationNotFound: unknown recommendation or product
        """
        recommendation = self.storage.get_recommendation(recommendation_id)
        if recommendation is None:
            raise RecommendationNotFound("Recommendation not found")

        product = self.storage.get_product(recommendation.product_id) if recommendation.product_id else None
        if product is None:
            raise RecommendationNotFound("Product not found")

        message = await self.message_writer.write(recommendation, product)
        updated = self.storage.update_personalized_message(recommendation_id, message)
        return message, enrich(updated or recommendation, product)

    # ============================================
    # Read
    # ============================================

    def get_session(self, session_id: str) -> List[Dict[str, Any]]:
        """Stored recommendations of a session, enriched, in creation order"""
        recommendations = self.storage.get_recommendations_by_session(session_id)
        products = self.storage.get_products(r.product_id for r in recommendations)
        return [enrich(r, products.get(r.product_id)) for r in recommendations]

    # ============================================
    # Helpers
    # ============================================

    def _session_facts(
        self,
        session_id: str,
        existing: List[GiftRecommendation],
        request: Optional[GiftFinderRequest],
        overrides: Optional[Dict[str, Any]] = None
    ) -> GiftFinderRequest:
        """
        Request facts of a session. Sessions created before request facts were
        stored are rebuilt from their first recommendation.
        """
        stored = self.storage.get_session_request(session_id)
        if stored is not None:
            facts = {
                "recipientName": stored.recipient_name,
                "recipientAge": stored.recipient_age,
                "relationship": stored.relationship,
                "interests": list(stored.interests or []),
                "personality": stored.personality,
                "budget": stored.budget,
                "occasion": stored.occasion,
            }
        else:
            first = existing[0]
            logger.debug(f"Session {session_id} has no stored request, using first recommendation")
            facts = {
                "recipientName": first.recipient_name,
                "recipientAge": first.recipient_age,
                "relationship": first.relationship or "friend",
                "interests": list(first.interests or []),
                "personality": first.personality,
                "budget": first.budget or DEFAULT_BUDGET,
                "occasion": first.occasion or "Just Because",
            }

        if request is not None:
            overrides = {
                "recipientName": request.recipientName,
                "recipientAge": request.recipientAge,
                "personality": request.personality,
            }
        for key, value in (overrides or {}).items():
            if value is not None:
                facts[key] = value

        # Stored facts were validated when the session was created
        return GiftFinderRequest.model_construct(**facts)

    def _exclusion_set(self, existing: List[GiftRecommendation]) -> Tuple[Set[str], List[str]]:
        ids = {r.product_id for r in existing if r.product_id}
        products = self.storage.get_products(ids)
        names = [p.name for p in products.values() if p.name]
        return ids, names

    def _persist_candidates(
        self,
        session_id: str,
        request: GiftFinderRequest,
        candidates: List[ScoredCandidate]
    ) -> List[Dict[str, Any]]:
        recommendations = []
        for candidate in candidates:
            try:
                if candidate.catalog_product_id:
                    product = self.storage.get_product(candidate.catalog_product_id)
                    if product is None:
                        logger.warning(f"Catalog product {candidate.catalog_product_id} vanished, skipping")
                        continue
                else:
                    product = self.storage.create_product(self._search_product_record(candidate, request))
            except SQLAlchemyError as e:
                logger.error(f"Failed to save product '{candidate.title}': {e}")
                continue

            saved = self._save_recommendation(
                session_id, request, product, candidate.reasoning, candidate.relevance_score, candidate.tier
            )
            if saved is not None:
                recommendations.append(saved)
        return recommendations

    def _save_recommendation(
        self,
        session_id: str,
        request: GiftFinderRequest,
        product: GiftProduct,
        reasoning: str,
        relevance_score: int,
        tier: str
    ) -> Optional[Dict[str, Any]]:
        try:
            recommendation = self.storage.create_recommendation(GiftRecommendation(
                session_id=session_id,
                recipient_name=request.recipientName,
                recipient_age=request.recipientAge,
                relationship=request.relationship,
                interests=list(request.interests),
                personality=request.personality,
                budget=request.budget,
                occasion=request.occasion,
                product_id=product.id,
                ai_reasoning=reasoning,
                personalized_message=None,
                relevance_score=relevance_score,
                generation_tier=tier,
            ))
        except SQLAlchemyError as e:
            logger.error(f"Failed to save recommendation for '{product.name}': {e}")
            return None
        return enrich(recommendation, product)

    @staticmethod
    def _search_product_record(candidate: ScoredCandidate, request: GiftFinderRequest) -> GiftProduct:
        """Minimal catalog record for a search-sourced product"""
        found = candidate.product
        price = found.price_value
        return GiftProduct(
            name=found.title,
            description=candidate.reasoning,
            category=candidate.category or "Marketplace Product",
            price_min=price,
            price_max=price,
            interests=list(request.interests),
            occasions=[request.occasion],
            relationships=[request.relationship],
            image_url=found.image_url or None,
            tags=_badge_tags(candidate),
            source=ProductSource.SEARCH.value,
            marketplace=found.marketplace,
            source_url=found.purchase_url or None,
            external_id=found.external_id,
            display_price=found.price,
            currency=found.currency,
            rating=found.rating,
            rating_count=found.rating_count,
            is_prime=found.is_prime,
            is_best_seller=found.is_best_seller,
            is_featured=found.is_featured,
        )
