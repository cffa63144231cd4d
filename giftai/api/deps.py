# api/deps.py
"""
Service singletons for the routers.
Routes receive these through FastAPI Depends(), so tests can swap them via
app.dependency_overrides.
"""

from typing import Optional
from loguru import logger

from giftai.agents.ai_generator import AIRecommendationGenerator
from giftai.agents.recommender import GiftRecommender
from giftai.agents.rule_based_generator import RuleBasedGenerator
from giftai.agents.session_assembler import SessionAssembler
from giftai.config import settings
from giftai.interfaces.product_search import ProductSearchClient
from giftai.interfaces.rate_limiter import FixedIntervalRateLimiter
from giftai.interfaces.storage import GiftStorage
from giftai.llm.chat_assistant import ChatAssistant
from giftai.llm.client import LLMClient
from giftai.llm.message_writer import PersonalizedMessageWriter


_storage: Optional[GiftStorage] = None
_llm: Optional[LLMClient] = None
_assembler: Optional[SessionAssembler] = None
_chat_assistant: Optional[ChatAssistant] = None


def get_storage() -> GiftStorage:
    global _storage
    if _storage is None:
        _storage = GiftStorage(settings.DATABASE_URL)
    return _storage


def get_llm() -> LLMClient:
    global _llm
    if _llm is None:
        _llm = LLMClient()
    return _llm


def build_assembler(
    storage: GiftStorage,
    llm: LLMClient,
    search_client: ProductSearchClient,
    rate_limiter=None
) -> SessionAssembler:
    """Wire the generation tiers, message writer and storage together"""
    rate_limiter = rate_limiter or FixedIntervalRateLimiter(settings.api_call_delay_seconds)
    ai_generator = AIRecommendationGenerator(llm, search_client, rate_limiter)
    rule_generator = RuleBasedGenerator(search_client, rate_limiter)
    return SessionAssembler(
        storage=storage,
        recommender=GiftRecommender(ai_generator, rule_generator),
        ai_generator=ai_generator,
        message_writer=PersonalizedMessageWriter(llm),
    )


def get_assembler() -> SessionAssembler:
    global _assembler
    if _assembler is None:
        _assembler = build_assembler(get_storage(), get_llm(), ProductSearchClient())
        logger.info(
            f"SessionAssembler ready (llm={'on' if get_llm().enabled else 'off'}, "
            f"search={'on' if settings.search_enabled else 'off'})"
        )
    return _assembler


def get_chat_assistant() -> ChatAssistant:
    global _chat_assistant
    if _chat_assistant is None:
        _chat_assistant = ChatAssistant(get_llm())
    return _chat_assistant
