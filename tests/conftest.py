"""
Shared fixtures: in-memory storage, scripted product search and LLM fakes.
"""

from typing import Callable, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from giftai.agents.ai_generator import AIRecommendationGenerator
from giftai.agents.recommender import GiftRecommender
from giftai.agents.rule_based_generator import RuleBasedGenerator
from giftai.agents.session_assembler import SessionAssembler
from giftai.errors import ProductSearchError
from giftai.interfaces.product_search import ProductSearchResult
from giftai.interfaces.rate_limiter import RateLimiter
from giftai.interfaces.storage import GiftStorage
from giftai.llm.message_writer import PersonalizedMessageWriter
from giftai.schemas.gift_schemas import GiftFinderRequest


# ======================================================================
# Fakes
# ======================================================================

def make_product(title: str, price: str = "₹999", **overrides) -> ProductSearchResult:
    data = {
        "title": title,
        "price": price,
        "rating": 4.3,
        "rating_count": 120,
        "purchase_url": f"https://www.amazon.in/dp/{abs(hash(title)) % 10**8}",
        "image_url": "https://images.example.com/p.jpg",
        "external_id": f"ASIN{abs(hash(title)) % 10**6}",
    }
    data.update(overrides)
    return ProductSearchResult(**data)


class FakeSearchClient:
    """
    Scripted stand-in for ProductSearchClient.

    Queries listed in `responses` return those products; queries in `failing`
    raise ProductSearchError; anything else gets generated products titled
    after the query.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, List[ProductSearchResult]]] = None,
        failing: Optional[List[str]] = None,
        default: Optional[Callable[[str, int], List[ProductSearchResult]]] = None
    ):
        self.responses = responses or {}
        self.failing = set(failing or [])
        self.default = default or self._generated
        self.calls: List[dict] = []

    @staticmethod
    def _generated(query: str, max_results: int) -> List[ProductSearchResult]:
        return [make_product(f"{query.title()} (Option {i + 1})") for i in range(max_results)]

    async def search(self, query: str, max_results: int = 10, country: Optional[str] = None):
        self.calls.append({"query": query, "max_results": max_results, "country": country})
        if query in self.failing:
            raise ProductSearchError(f"search failed for {query}", status_code=500)
        if query in self.responses:
            return list(self.responses[query])[:max_results]
        return self.default(query, max_results)

    @property
    def queries(self) -> List[str]:
        return [c["query"] for c in self.calls]


class FakeLLM:
    """Stand-in for LLMClient with AsyncMock completion methods"""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.complete_json = AsyncMock()
        self.complete_text = AsyncMock()


class CountingRateLimiter(RateLimiter):
    def __init__(self):
        self.count = 0

    async def acquire(self) -> None:
        self.count += 1


# ======================================================================
# Fixtures
# ======================================================================

@pytest.fixture
def storage() -> GiftStorage:
    store = GiftStorage("sqlite://")
    store.init_db()
    return store


@pytest.fixture
def search_client() -> FakeSearchClient:
    return FakeSearchClient()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM(enabled=False)


@pytest.fixture
def rate_limiter() -> CountingRateLimiter:
    return CountingRateLimiter()


@pytest.fixture
def cricket_request() -> GiftFinderRequest:
    return GiftFinderRequest(
        recipientName="Rahul",
        recipientAge=27,
        relationship="friend",
        interests=["Cricket"],
        budget="₹500-₹2000",
        occasion="Birthday",
    )


def build_assembler(storage, llm, search_client, rate_limiter=None) -> SessionAssembler:
    rate_limiter = rate_limiter or CountingRateLimiter()
    ai_generator = AIRecommendationGenerator(llm, search_client, rate_limiter, country="IN")
    rule_generator = RuleBasedGenerator(search_client, rate_limiter)
    return SessionAssembler(
        storage=storage,
        recommender=GiftRecommender(ai_generator, rule_generator),
        ai_generator=ai_generator,
        message_writer=PersonalizedMessageWriter(llm),
    )


@pytest.fixture
def assembler(storage, llm, search_client, rate_limiter) -> SessionAssembler:
    return build_assembler(storage, llm, search_client, rate_limiter)
