"""
Chat assistant: LLM-driven fact extraction, keyword fallback and the
readiness decision.

Run with: pytest tests/test_chat_assistant.py -v
"""

from giftai.errors import SuggestionServiceError
from giftai.llm.chat_assistant import (
    ChatAssistant,
    extract_keywords,
    merge_state,
    wants_to_proceed,
)
from giftai.schemas.gift_schemas import ConversationState

from conftest import FakeLLM


def _llm_reply(response="Tell me more!", extracted=None, ready=False) -> FakeLLM:
    llm = FakeLLM(enabled=True)
    llm.complete_json.return_value = {
        "response": response,
        "extractedInfo": extracted or {},
        "readyToRecommend": ready,
    }
    return llm


# ======================================================================
# Keyword helpers
# ======================================================================

class TestKeywords:

    def test_extracts_interest_relationship_and_occasion(self):
        assert extract_keywords("Diwali present for my mom, she loves gardening and tea") == {
            "interests": ["Gardening", "Tea"],
            "relationship": "mother",
            "occasion": "Diwali",
        }

    def test_nothing_recognised(self):
        assert extract_keywords("hmm not sure yet") == {}

    def test_proceed_words_need_word_boundaries(self):
        assert wants_to_proceed("Yes, go ahead")
        assert wants_to_proceed("please show me")
        assert not wants_to_proceed("she is a big gamer")
        assert not wants_to_proceed("looking for something")


class TestMergeState:

    def test_empty_interest_list_keeps_previous(self):
        state = ConversationState(interests=["Cricket"])

        merged = merge_state(state, {"interests": [], "occasion": "Birthday"})

        assert merged.interests == ["Cricket"]
        assert merged.occasion == "Birthday"

    def test_budget_is_normalised_and_unknown_ignored(self):
        state = ConversationState(budget="₹2000-₹5000")

        assert merge_state(state, {"budget": "lots of money"}).budget == "₹2000-₹5000"
        assert merge_state(state, {"budget": " ₹500-₹2000 "}).budget == "₹500-₹2000"

    def test_non_string_fields_are_skipped(self):
        state = ConversationState(relationship="sister")

        merged = merge_state(state, {"relationship": ["friend"], "personality": 3, "budget": ["₹500-₹2000"]})

        assert merged.relationship == "sister"
        assert merged.personality is None
        assert merged.budget is None

    def test_age_is_coerced(self):
        assert merge_state(ConversationState(), {"recipientAge": "31"}).recipientAge == 31
        assert merge_state(ConversationState(recipientAge=30), {"recipientAge": "thirty"}).recipientAge == 30


# ======================================================================
# Turns
# ======================================================================

class TestReply:

    async def test_llm_facts_are_merged(self):
        llm = _llm_reply(
            response="Lovely! What's your budget?",
            extracted={"recipientName": "Asha", "interests": ["Yoga"], "relationship": "sister"},
        )

        reply = await ChatAssistant(llm).reply("My sister Asha loves yoga")

        assert reply.response == "Lovely! What's your budget?"
        assert reply.conversationState.recipientName == "Asha"
        assert reply.conversationState.interests == ["Yoga"]
        assert reply.readyToRecommend is False

    async def test_llm_ready_fills_defaults(self):
        llm = _llm_reply(response="On it!", extracted={"interests": ["Music"]}, ready=True)

        reply = await ChatAssistant(llm).reply("just music, nothing else")

        state = reply.conversationState
        assert reply.readyToRecommend is True
        assert state.budget == "₹500-₹2000"
        assert state.occasion == "Just Because"
        assert state.relationship == "friend"

    async def test_proceed_word_forces_ready(self):
        llm = _llm_reply(response="Anything else?")
        state = ConversationState(interests=["Chess"], relationship="colleague")

        reply = await ChatAssistant(llm).reply("ok go ahead", state)

        assert reply.readyToRecommend is True
        assert reply.conversationState.relationship == "colleague"
        assert reply.response == "Anything else?"

    async def test_proceed_without_interests_is_not_ready(self):
        reply = await ChatAssistant(_llm_reply()).reply("yes please")

        assert reply.readyToRecommend is False

    async def test_llm_failure_uses_keywords(self):
        llm = FakeLLM(enabled=True)
        llm.complete_json.side_effect = SuggestionServiceError("LLM call timed out after 20s")

        reply = await ChatAssistant(llm).reply("anniversary gift for my wife who loves photography")

        state = reply.conversationState
        assert state.interests == ["Photography"]
        assert state.relationship == "partner"
        assert state.occasion == "Anniversary"
        assert reply.readyToRecommend is True
        assert "photography" in reply.response

    async def test_missing_response_text_uses_keywords(self):
        llm = FakeLLM(enabled=True)
        llm.complete_json.return_value = {"extractedInfo": {"interests": ["Art"]}}

        reply = await ChatAssistant(llm).reply("she paints, loves art")

        assert reply.conversationState.interests == ["Art"]
        assert reply.readyToRecommend is True

    async def test_disabled_llm_is_never_called(self):
        llm = FakeLLM(enabled=False)

        reply = await ChatAssistant(llm).reply("not sure what to get")

        llm.complete_json.assert_not_awaited()
        assert reply.readyToRecommend is False
        assert reply.conversationState.interests == []

    async def test_malformed_llm_fields_are_ignored(self):
        llm = _llm_reply(
            response="Got it!",
            extracted={
                "relationship": ["friend"],
                "recipientName": 42,
                "occasion": {"name": "Birthday"},
                "interests": ["Cricket", 7],
            },
            ready=True,
        )
        state = ConversationState(recipientName="Rahul")

        reply = await ChatAssistant(llm).reply("cricket stuff for Rahul", state)

        merged = reply.conversationState
        assert merged.recipientName == "Rahul"
        assert merged.interests == ["Cricket"]
        assert merged.relationship == "friend"
        assert merged.occasion == "Just Because"
        assert reply.readyToRecommend is True
