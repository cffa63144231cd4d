"""
Session assembler: create, extend ("load more"), refine and message
regeneration against in-memory storage.

Run with: pytest tests/test_session_assembler.py -v
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from giftai.data.catalog import seed_catalog
from giftai.errors import (
    NoRecommendationsFound,
    RecommendationNotFound,
    SessionExhausted,
    SessionNotFound,
    SuggestionServiceError,
)
from giftai.schemas.gift_schemas import GiftFinderRequest
from giftai.schemas.tables import GiftProduct, GiftRecommendation

from conftest import FakeLLM, FakeSearchClient, build_assembler


def _failing_llm() -> FakeLLM:
    llm = FakeLLM(enabled=True)
    llm.complete_json.side_effect = SuggestionServiceError("LLM call timed out after 30s")
    llm.complete_text.side_effect = SuggestionServiceError("LLM call timed out after 15s")
    return llm


def _session_product_ids(storage, session_id):
    return [r.product_id for r in storage.get_recommendations_by_session(session_id)]


def _no_results(query, max_results):
    return []


# ======================================================================
# Create
# ======================================================================

class TestCreateSession:

    async def test_ai_failure_falls_back_to_cricket_rules(self, storage, cricket_request):
        search = FakeSearchClient()
        assembler = build_assembler(storage, _failing_llm(), search)

        batch = await assembler.create_session(cricket_request)

        assert batch.tier == "rules"
        assert batch.recommendations
        for rec in batch.recommendations:
            assert "cricket" in rec["product"]["name"].lower()
            assert rec["generationTier"] == "rules"
            assert rec["sessionId"] == batch.session_id
            assert rec["product"]["source"] == "search"
            assert rec["product"]["purchaseUrl"].startswith("https://www.amazon.in/")
            assert rec["product"]["affiliateLink"] is None
        assert all("cricket" in q for q in search.queries)

    async def test_request_facts_are_stored(self, storage, cricket_request):
        assembler = build_assembler(storage, FakeLLM(enabled=False), FakeSearchClient())

        batch = await assembler.create_session(cricket_request)

        stored = storage.get_session_request(batch.session_id)
        assert stored.interests == ["Cricket"]
        assert stored.budget == "₹500-₹2000"
        assert stored.recipient_name == "Rahul"

    async def test_ai_tier_serves_when_available(self, storage, cricket_request):
        llm = FakeLLM(enabled=True)
        llm.complete_json.return_value = {
            "suggestions": [
                {"searchPhrase": "cricket bat", "reasoning": "He plays every weekend", "relevanceScore": 95},
            ]
        }
        assembler = build_assembler(storage, llm, FakeSearchClient())

        batch = await assembler.create_session(cricket_request)

        assert batch.tier == "ai"
        assert batch.recommendations[0]["aiReasoning"] == "He plays every weekend"
        assert batch.recommendations[0]["relevanceScore"] == 95

    async def test_nothing_found_creates_no_session(self, storage, cricket_request):
        search = FakeSearchClient(default=lambda query, n: [])
        assembler = build_assembler(storage, _failing_llm(), search)

        with pytest.raises(NoRecommendationsFound):
            await assembler.create_session(cricket_request)

        assert storage.count_products() == 0

    async def test_catalog_serves_when_live_tiers_find_nothing(self, storage, cricket_request):
        seed_catalog(storage)
        assembler = build_assembler(storage, _failing_llm(), FakeSearchClient(default=_no_results))

        batch = await assembler.create_session(cricket_request)

        assert batch.tier == "catalog"
        assert 0 < len(batch.recommendations) <= 8
        for rec in batch.recommendations:
            assert rec["product"]["source"] == "catalog"
            assert rec["product"]["priceMin"] <= 2000 and rec["product"]["priceMax"] >= 500
        assert storage.count_products(source="search") == 0
        assert "Cricket" in batch.recommendations[0]["product"]["interests"]

    async def test_unsaved_rows_mean_no_session(self, storage, cricket_request, monkeypatch):
        def broken_write(recommendation):
            raise SQLAlchemyError("disk I/O error")

        monkeypatch.setattr(storage, "create_recommendation", broken_write)
        assembler = build_assembler(storage, FakeLLM(enabled=False), FakeSearchClient())

        with pytest.raises(NoRecommendationsFound):
            await assembler.create_session(cricket_request)


# ======================================================================
# Extend
# ======================================================================

class TestExtendSession:

    async def test_unknown_session_calls_no_collaborator(self, storage):
        llm = FakeLLM(enabled=True)
        search = FakeSearchClient()
        assembler = build_assembler(storage, llm, search)

        with pytest.raises(SessionNotFound):
            await assembler.extend_session("no-such-session")

        llm.complete_json.assert_not_awaited()
        assert search.calls == []

    async def test_extend_never_repeats_a_product(self, storage, cricket_request):
        seed_catalog(storage)
        search = FakeSearchClient()
        assembler = build_assembler(storage, _failing_llm(), search)
        batch = await assembler.create_session(cricket_request)
        search.default = _no_results
        first_ids = set(_session_product_ids(storage, batch.session_id))

        more = await assembler.extend_session(batch.session_id)

        new_ids = [r["productId"] for r in more.recommendations]
        assert more.tier == "catalog"
        assert 0 < len(new_ids) <= 8
        assert len(set(new_ids)) == len(new_ids)
        assert not first_ids & set(new_ids)
        assert all(r["product"]["source"] == "catalog" for r in more.recommendations)

    async def test_repeated_extend_is_eventually_exhausted(self, storage, cricket_request):
        seed_catalog(storage)
        assembler = build_assembler(storage, FakeLLM(enabled=False), FakeSearchClient())
        batch = await assembler.create_session(cricket_request)

        rounds = 0
        with pytest.raises(SessionExhausted):
            while rounds < 20:
                await assembler.extend_session(batch.session_id)
                rounds += 1

        assert rounds >= 1
        ids = _session_product_ids(storage, batch.session_id)
        assert len(ids) == len(set(ids))

    async def test_llm_picks_of_shown_products_are_dropped(self, storage, cricket_request):
        seed_catalog(storage)
        llm = FakeLLM(enabled=True)
        llm.complete_json.side_effect = SuggestionServiceError("down")
        search = FakeSearchClient()
        assembler = build_assembler(storage, llm, search)
        batch = await assembler.create_session(cricket_request)
        search.default = _no_results
        first_more = await assembler.extend_session(batch.session_id)
        shown_id = first_more.recommendations[0]["productId"]

        shown = set(_session_product_ids(storage, batch.session_id))
        fresh = next(p for p in storage.list_products(source="catalog") if p.name == "Smart Fitness Band")
        assert fresh.id not in shown

        llm.complete_json.side_effect = None
        llm.complete_json.return_value = {
            "recommendations": [
                {"productId": shown_id, "reasoning": "again", "relevanceScore": 99},
                {"productId": fresh.id, "reasoning": "new one", "relevanceScore": 90},
            ]
        }

        more = await assembler.extend_session(batch.session_id)

        assert [r["productId"] for r in more.recommendations] == [fresh.id]
        assert more.recommendations[0]["aiReasoning"] == "new one"

    async def test_stored_facts_win_over_caller_request(self, storage, cricket_request):
        seed_catalog(storage)
        assembler = build_assembler(storage, FakeLLM(enabled=False), FakeSearchClient())
        batch = await assembler.create_session(cricket_request)
        caller = GiftFinderRequest(
            recipientName="Priya",
            relationship="colleague",
            interests=["Gaming"],
            budget="₹10000+",
            occasion="Diwali",
        )

        more = await assembler.extend_session(batch.session_id, caller)

        for rec in more.recommendations:
            assert rec["interests"] == ["Cricket"]
            assert rec["budget"] == "₹500-₹2000"
            assert rec["recipientName"] == "Priya"

    async def test_legacy_session_uses_first_recommendation(self, storage):
        seed_catalog(storage)
        product = storage.create_product(GiftProduct(name="Old Cricket Bat", price_min=900, price_max=900, source="search"))
        storage.create_recommendation(GiftRecommendation(
            session_id="legacy-1",
            relationship="friend",
            interests=["Cricket"],
            budget="₹500-₹2000",
            occasion="Birthday",
            product_id=product.id,
            relevance_score=80,
        ))
        assembler = build_assembler(storage, FakeLLM(enabled=False), FakeSearchClient())

        more = await assembler.extend_session("legacy-1")

        assert more.recommendations
        assert "Cricket" in more.recommendations[0]["product"]["interests"]
        assert more.recommendations[0]["interests"] == ["Cricket"]

    async def test_empty_catalog_is_exhausted(self, storage, cricket_request):
        search = FakeSearchClient()
        assembler = build_assembler(storage, FakeLLM(enabled=False), search)
        batch = await assembler.create_session(cricket_request)
        search.default = _no_results

        with pytest.raises(SessionExhausted):
            await assembler.extend_session(batch.session_id)

    async def test_live_results_come_first_and_skip_shown_titles(self, storage, cricket_request):
        seed_catalog(storage)
        llm = FakeLLM(enabled=True)
        llm.complete_json.return_value = {
            "suggestions": [{"searchPhrase": "cricket bat", "reasoning": "He plays every weekend", "relevanceScore": 92}]
        }
        assembler = build_assembler(storage, llm, FakeSearchClient())
        batch = await assembler.create_session(cricket_request)
        first_title = batch.recommendations[0]["product"]["name"]

        more = await assembler.extend_session(batch.session_id)

        assert more.tier == "ai"
        assert [r["product"]["name"] for r in more.recommendations] == ["Cricket Bat (Option 2)"]
        assert first_title == "Cricket Bat (Option 1)"
        user_prompt = llm.complete_json.await_args.args[1]
        assert first_title in user_prompt

    async def test_catalog_takes_over_when_live_results_run_out(self, storage, cricket_request):
        seed_catalog(storage)
        search = FakeSearchClient()
        assembler = build_assembler(storage, FakeLLM(enabled=False), search)
        batch = await assembler.create_session(cricket_request)

        tiers = []
        while len(tiers) < 20:
            try:
                tiers.append((await assembler.extend_session(batch.session_id)).tier)
            except SessionExhausted:
                break

        assert tiers[0] == "rules"
        assert "catalog" in tiers
        assert tiers.index("catalog") > 0
        assert all(t == "catalog" for t in tiers[tiers.index("catalog"):])


# ======================================================================
# Messages
# ======================================================================

class TestRegenerateMessage:

    async def test_message_is_overwritten_every_time(self, storage, cricket_request):
        llm = FakeLLM(enabled=True)
        llm.complete_json.side_effect = SuggestionServiceError("down")
        llm.complete_text.side_effect = ["First message", "Second message"]
        assembler = build_assembler(storage, llm, FakeSearchClient())
        batch = await assembler.create_session(cricket_request)
        rec_id = batch.recommendations[0]["id"]

        message, rec = await assembler.regenerate_message(rec_id)
        assert message == "First message"
        assert rec["personalizedMessage"] == "First message"

        message, rec = await assembler.regenerate_message(rec_id)
        assert message == "Second message"
        assert storage.get_recommendation(rec_id).personalized_message == "Second message"
        assert llm.complete_text.await_count == 2

    async def test_template_fallback_when_llm_fails(self, storage, cricket_request):
        assembler = build_assembler(storage, _failing_llm(), FakeSearchClient())
        batch = await assembler.create_session(cricket_request)
        rec = batch.recommendations[0]

        message, _ = await assembler.regenerate_message(rec["id"])

        assert rec["product"]["name"] in message
        assert message.startswith("Rahul")
        assert storage.get_recommendation(rec["id"]).personalized_message == message

    async def test_unknown_recommendation(self, storage):
        assembler = build_assembler(storage, FakeLLM(enabled=False), FakeSearchClient())

        with pytest.raises(RecommendationNotFound):
            await assembler.regenerate_message("missing")


# ======================================================================
# Refine
# ======================================================================

class TestRefineSession:

    async def test_refinement_adds_llm_driven_products(self, storage, cricket_request):
        llm = FakeLLM(enabled=True)
        llm.complete_json.side_effect = [
            SuggestionServiceError("down"),
            {
                "response": "Here are some cheaper options!",
                "suggestions": [
                    {"searchQuery": "cricket tennis ball pack", "reasoning": "Budget friendly", "relevanceScore": 82},
                    {"searchQuery": "cricket grip cone", "reasoning": "Small and useful", "relevanceScore": 78},
                ],
            },
        ]
        assembler = build_assembler(storage, llm, FakeSearchClient())
        batch = await assembler.create_session(cricket_request)

        acknowledgement, recs = await assembler.refine_session(batch.session_id, "something cheaper")

        assert acknowledgement == "Here are some cheaper options!"
        assert [r["generationTier"] for r in recs] == ["refine", "refine"]
        assert len(storage.get_recommendations_by_session(batch.session_id)) == len(batch.recommendations) + 2

    async def test_refinement_falls_back_to_rules(self, storage, cricket_request):
        search = FakeSearchClient()
        assembler = build_assembler(storage, FakeLLM(enabled=False), search)
        batch = await assembler.create_session(cricket_request)
        calls_before = len(search.calls)

        _, recs = await assembler.refine_session(batch.session_id, "more options please", recipient_name="Rohan")

        assert 0 < len(recs) <= 4
        assert len(search.calls) - calls_before <= 4
        assert all(r["recipientName"] == "Rohan" for r in recs)
        names = [r["product"]["name"] for r in batch.recommendations + recs]
        assert len(names) == len(set(names))

    async def test_unknown_session(self, storage):
        assembler = build_assembler(storage, FakeLLM(enabled=False), FakeSearchClient())

        with pytest.raises(SessionNotFound):
            await assembler.refine_session("missing", "cheaper")


# ======================================================================
# Read
# ======================================================================

class TestGetSession:

    async def test_returns_enriched_rows_in_order(self, storage, cricket_request):
        assembler = build_assembler(storage, FakeLLM(enabled=False), FakeSearchClient())
        batch = await assembler.create_session(cricket_request)

        rows = assembler.get_session(batch.session_id)

        assert [r["id"] for r in rows] == [r["id"] for r in batch.recommendations]
        assert all(r["product"] is not None for r in rows)

    def test_unknown_session_is_empty(self, storage):
        assembler = build_assembler(storage, FakeLLM(enabled=False), FakeSearchClient())
        assert assembler.get_session("missing") == []
