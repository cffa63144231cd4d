# llm/chat_assistant.py
"""
Chat Assistant
Extracts recipient facts from free-text chat and decides when there is enough
to run a recommendation. Uses the LLM when available and keyword rules
otherwise.
"""

import json
import re
from typing import Dict, Any, Optional, Tuple
from loguru import logger

from giftai.agents.rule_based_generator import INTEREST_SEARCH_PHRASES
from giftai.algorithms.relevance_scorer import DEFAULT_BUDGET, is_known_budget, normalize_budget_label
from giftai.errors import SuggestionServiceError
from giftai.llm.client import LLMClient
from giftai.llm.prompts import CHAT_SYSTEM_PROMPT, CHAT_PROMPT
from giftai.schemas.gift_schemas import ConversationState, ChatResponse


DEFAULT_OCCASION = "Just Because"
DEFAULT_RELATIONSHIP = "friend"

PROCEED_KEYWORDS = ["yes", "sure", "ok", "okay", "go ahead", "find", "search", "show", "get", "recommend"]

RELATIONSHIP_KEYWORDS = {
    "friend": "friend",
    "mom": "mother",
    "mother": "mother",
    "dad": "father",
    "father": "father",
    "wife": "partner",
    "husband": "partner",
    "girlfriend": "partner",
    "boyfriend": "partner",
    "partner": "partner",
    "brother": "sibling",
    "sister": "sibling",
    "colleague": "colleague",
    "boss": "colleague",
}

OCCASION_KEYWORDS = {
    "birthday": "Birthday",
    "anniversary": "Anniversary",
    "diwali": "Diwali",
    "wedding": "Wedding",
    "graduation": "Graduation",
    "valentine": "Valentine's Day",
    "christmas": "Christmas",
    "rakhi": "Raksha Bandhan",
    "housewarming": "Housewarming",
}

_STATE_FIELDS = ("recipientName", "recipientAge", "relationship", "personality", "budget", "occasion")


def _contains_word(text: str, word: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", text) is not None


def wants_to_proceed(message: str) -> bool:
    lowered = message.lower()
    return any(_contains_word(lowered, keyword) for keyword in PROCEED_KEYWORDS)


def extract_keywords(message: str) -> Dict[str, Any]:
    """
    Keyword-based fact extraction

    Example:
        >>> extract_keywords("birthday gift for my cricket-loving friend")
        {'interests': ['Cricket'], 'relationship': 'friend', 'occasion': 'Birthday'}
    """
    lowered = message.lower()
    extracted: Dict[str, Any] = {}

    interests = [key.title() for key in INTEREST_SEARCH_PHRASES if _contains_word(lowered, key)]
    if interests:
        extracted["interests"] = interests

    for keyword, relationship in RELATIONSHIP_KEYWORDS.items():
        if _contains_word(lowered, keyword):
            extracted["relationship"] = relationship
            break

    for keyword, occasion in OCCASION_KEYWORDS.items():
        if keyword in lowered:
            extracted["occasion"] = occasion
            break

    return extracted


def merge_state(state: ConversationState, extracted: Dict[str, Any]) -> ConversationState:
    """Overlay newly extracted facts; interests are replaced only by a non-empty list"""
    data = state.model_dump()
    for field in _STATE_FIELDS:
        value = extracted.get(field)
        if value is None:
            continue
        if field != "recipientAge":
            if not isinstance(value, str) or not value.strip():
                logger.debug(f"Ignoring extracted {field}={value!r}")
                continue
            value = value.strip()
        if field == "budget":
            value = normalize_budget_label(value)
            if not is_known_budget(value):
                continue
        if field == "recipientAge":
            try:
                value = int(value)
            except (TypeError, ValueError):
                continue
        data[field] = value

    interests = extracted.get("interests")
    if isinstance(interests, list):
        cleaned = [i.strip() for i in interests if isinstance(i, str) and i.strip()]
        if cleaned:
            data["interests"] = cleaned
    return ConversationState(**data)


def fill_defaults(state: ConversationState) -> ConversationState:
    return state.model_copy(update={
        "budget": state.budget or DEFAULT_BUDGET,
        "occasion": state.occasion or DEFAULT_OCCASION,
        "relationship": state.relationship or DEFAULT_RELATIONSHIP,
    })


class ChatAssistant:
    """Conversational front door to the gift finder"""

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def reply(self, message: str, state: Optional[ConversationState] = None) -> ChatResponse:
        """
        Process one chat turn

        Returns:
            ChatResponse: reply text, merged state and readiness flag
        """
        state = state or ConversationState()

        llm_ready = False
        response_text = None
        extracted: Dict[str, Any] = {}

        if self.llm.enabled:
            try:
                response_text, extracted, llm_ready = await self._llm_turn(message, state)
            except SuggestionServiceError as e:
                logger.warning(f"Chat extraction failed, using keyword rules: {e}")

        if response_text is None:
            extracted = extract_keywords(message)

        updated = merge_state(state, extracted)

        ready = False
        if updated.interests and (llm_ready or wants_to_proceed(message) or response_text is None):
            ready = True
            updated = fill_defaults(updated)

        if response_text is None:
            response_text = self._fallback_response(updated, ready)

        logger.info(f"Chat turn: interests={updated.interests} ready={ready}")
        return ChatResponse(response=response_text, conversationState=updated, readyToRecommend=ready)

    async def _llm_turn(self, message: str, state: ConversationState) -> Tuple[str, Dict[str, Any], bool]:
        data = await self.llm.complete_json(
            CHAT_SYSTEM_PROMPT,
            CHAT_PROMPT.format(
                state=json.dumps(state.model_dump(), ensure_ascii=False),
                message=message,
            ),
        )
        response_text = str(data.get("response") or "").strip()
        if not response_text:
            raise SuggestionServiceError("chat response missing 'response'")
        extracted = data.get("extractedInfo")
        if not isinstance(extracted, dict):
            extracted = {}
        return response_text, extracted, bool(data.get("readyToRecommend"))

    @staticmethod
    def _fallback_response(state: ConversationState, ready: bool) -> str:
        if ready:
            interests = ", ".join(state.interests).lower()
            return f"Great! Let me find some amazing {interests} gifts for them!"
        return "I'd love to help! What are they into? Tell me a hobby or interest and I'll find gifts they'll love."


__all__ = ["ChatAssistant", "extract_keywords", "merge_state", "wants_to_proceed", "fill_defaults"]
