"""
AI-augmented tier: LLM suggestions turned into products, failure as values,
catalog picks with scorer fallback, and refinement.

Run with: pytest tests/test_ai_generator.py -v
"""

from giftai.agents.ai_generator import AIRecommendationGenerator
from giftai.errors import SuggestionServiceError
from giftai.schemas.tables import GiftProduct

from conftest import FakeLLM, FakeSearchClient, make_product


def _suggestions(*phrases, score=90):
    return {
        "suggestions": [
            {"searchPhrase": p, "reasoning": f"Because {p}", "relevanceScore": score, "category": "Sports"}
            for p in phrases
        ]
    }


def _catalog_product(pid, name, interests, price=(800, 1500)):
    return GiftProduct(
        id=pid,
        name=name,
        description=name,
        category="Sports",
        price_min=price[0],
        price_max=price[1],
        interests=interests,
        occasions=["Birthday"],
        relationships=["friend"],
        source="catalog",
    )


# ======================================================================
# Primary path
# ======================================================================

class TestGenerate:

    async def test_disabled_llm_fails_without_network(self, cricket_request):
        llm = FakeLLM(enabled=False)
        search = FakeSearchClient()
        generator = AIRecommendationGenerator(llm, search)

        result = await generator.generate(cricket_request, [])

        assert not result.ok
        llm.complete_json.assert_not_awaited()
        assert search.calls == []

    async def test_timeout_is_a_failed_result(self, cricket_request):
        llm = FakeLLM()
        llm.complete_json.side_effect = SuggestionServiceError("LLM call timed out after 30s")
        search = FakeSearchClient()

        result = await AIRecommendationGenerator(llm, search).generate(cricket_request, [])

        assert not result.ok
        assert "timed out" in result.error
        assert search.calls == []

    async def test_empty_suggestion_list_is_a_failed_result(self, cricket_request):
        llm = FakeLLM()
        llm.complete_json.return_value = {"suggestions": []}

        result = await AIRecommendationGenerator(llm, FakeSearchClient()).generate(cricket_request, [])

        assert not result.ok

    async def test_malformed_payload_is_a_failed_result(self, cricket_request):
        llm = FakeLLM()
        llm.complete_json.return_value = {"suggestions": "cricket bat"}

        result = await AIRecommendationGenerator(llm, FakeSearchClient()).generate(cricket_request, [])

        assert not result.ok

    async def test_suggestions_become_candidates_in_order(self, cricket_request):
        llm = FakeLLM()
        llm.complete_json.return_value = _suggestions("cricket bat", "cricket helmet")
        search = FakeSearchClient()

        result = await AIRecommendationGenerator(llm, search, country="IN").generate(cricket_request, [])

        assert result.ok
        assert result.tier == "ai"
        assert [c.search_phrase for c in result.candidates] == ["cricket bat", "cricket helmet"]
        assert result.candidates[0].reasoning == "Because cricket bat"
        assert result.candidates[0].relevance_score == 90
        assert all(call["max_results"] == 3 and call["country"] == "IN" for call in search.calls)

    async def test_scores_are_clamped(self, cricket_request):
        llm = FakeLLM()
        llm.complete_json.return_value = {
            "suggestions": [
                {"searchPhrase": "cricket bat", "reasoning": "r", "relevanceScore": 150},
                {"searchPhrase": "cricket ball", "reasoning": "r", "relevanceScore": -4},
            ]
        }

        result = await AIRecommendationGenerator(llm, FakeSearchClient()).generate(cricket_request, [])

        assert [c.relevance_score for c in result.candidates] == [100, 1]

    async def test_phrases_without_products_are_dropped(self, cricket_request):
        llm = FakeLLM()
        llm.complete_json.return_value = _suggestions("cricket bat", "cricket unicorn")
        search = FakeSearchClient(responses={"cricket unicorn": []})

        result = await AIRecommendationGenerator(llm, search).generate(cricket_request, [])

        assert [c.search_phrase for c in result.candidates] == ["cricket bat"]

    async def test_failed_search_is_skipped(self, cricket_request):
        llm = FakeLLM()
        llm.complete_json.return_value = _suggestions("cricket bat", "cricket helmet")
        search = FakeSearchClient(failing=["cricket bat"])

        result = await AIRecommendationGenerator(llm, search).generate(cricket_request, [])

        assert [c.search_phrase for c in result.candidates] == ["cricket helmet"]

    async def test_no_products_at_all_is_a_failed_result(self, cricket_request):
        llm = FakeLLM()
        llm.complete_json.return_value = _suggestions("cricket bat", "cricket helmet")
        search = FakeSearchClient(default=lambda query, n: [])

        result = await AIRecommendationGenerator(llm, search).generate(cricket_request, [])

        assert not result.ok

    async def test_excluded_titles_are_skipped(self, cricket_request):
        llm = FakeLLM()
        llm.complete_json.return_value = _suggestions("cricket bat")
        search = FakeSearchClient(responses={
            "cricket bat": [make_product("SG Cricket Bat Kashmir Willow Pro"), make_product("SS Cricket Bat")],
        })

        result = await AIRecommendationGenerator(llm, search).generate(
            cricket_request, ["sg cricket bat kashmir willow"]
        )

        assert [c.title for c in result.candidates] == ["SS Cricket Bat"]


# ======================================================================
# Catalog picks
# ======================================================================

class TestGenerateStructured:

    async def test_unknown_ids_are_discarded(self, cricket_request):
        catalog = [_catalog_product("p1", "Bat", ["Cricket"]), _catalog_product("p2", "Ball", ["Cricket"])]
        llm = FakeLLM()
        llm.complete_json.return_value = {
            "recommendations": [
                {"productId": "ghost", "reasoning": "x", "relevanceScore": 99},
                {"productId": "p2", "reasoning": "Great ball", "relevanceScore": 88},
                {"productId": "p2", "reasoning": "dup", "relevanceScore": 70},
            ]
        }

        picks = await AIRecommendationGenerator(llm, FakeSearchClient()).generate_structured(cricket_request, catalog)

        assert [(p.product_id, p.reasoning, p.relevance_score) for p in picks] == [("p2", "Great ball", 88)]

    async def test_non_string_ids_are_discarded(self, cricket_request):
        catalog = [_catalog_product("p1", "Bat", ["Cricket"])]
        llm = FakeLLM()
        llm.complete_json.return_value = {
            "recommendations": [
                {"productId": ["p1"], "reasoning": "x", "relevanceScore": 99},
                {"productId": "p1", "reasoning": "Solid bat", "relevanceScore": 85},
            ]
        }

        picks = await AIRecommendationGenerator(llm, FakeSearchClient()).generate_structured(cricket_request, catalog)

        assert [(p.product_id, p.reasoning) for p in picks] == [("p1", "Solid bat")]

    async def test_failure_falls_back_to_scorer(self, cricket_request):
        catalog = [
            _catalog_product("low", "Headset", ["Gaming"]),
            _catalog_product("high", "Bat", ["Cricket"]),
        ]
        llm = FakeLLM()
        llm.complete_json.side_effect = SuggestionServiceError("boom")

        picks = await AIRecommendationGenerator(llm, FakeSearchClient()).generate_structured(cricket_request, catalog)

        assert [p.product_id for p in picks] == ["high", "low"]
        assert picks[0].relevance_score == 100
        assert picks[0].reasoning.startswith("Perfect Match")

    async def test_scorer_fallback_caps_at_eight(self, cricket_request):
        catalog = [_catalog_product(f"p{i}", f"Item {i}", ["Cricket"]) for i in range(12)]

        picks = await AIRecommendationGenerator(FakeLLM(enabled=False), FakeSearchClient()).generate_structured(
            cricket_request, catalog
        )

        assert len(picks) == 8


# ======================================================================
# Refinement
# ======================================================================

class TestGenerateRefinement:

    async def test_search_queries_are_used_with_two_results(self, cricket_request):
        llm = FakeLLM()
        llm.complete_json.return_value = {
            "response": "Here are some cheaper picks!",
            "suggestions": [
                {"searchQuery": f"budget cricket item {i}", "reasoning": "cheaper", "relevanceScore": 80}
                for i in range(6)
            ],
        }
        search = FakeSearchClient()

        acknowledgement, result = await AIRecommendationGenerator(llm, search).generate_refinement(
            "something cheaper", cricket_request, []
        )

        assert acknowledgement == "Here are some cheaper picks!"
        assert result.ok
        assert result.tier == "refine"
        assert len(result.candidates) == 4
        assert all(call["max_results"] == 2 for call in search.calls)

    async def test_llm_failure_has_no_acknowledgement(self, cricket_request):
        llm = FakeLLM()
        llm.complete_json.side_effect = SuggestionServiceError("down")

        acknowledgement, result = await AIRecommendationGenerator(llm, FakeSearchClient()).generate_refinement(
            "cheaper", cricket_request, []
        )

        assert acknowledgement is None
        assert not result.ok
