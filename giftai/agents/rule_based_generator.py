# agents/rule_based_generator.py
"""
Rule-Based Suggestion Generator
Deterministic fallback tier: maps interests to fixed search phrases, searches
each phrase and keeps the first product that was not shown before.

Used when the AI tier is disabled (empty API key) or fails entirely.
"""

import hashlib
from typing import List, Optional, Iterable
from loguru import logger

from giftai.agents.candidates import ScoredCandidate, TierResult
from giftai.errors import ProductSearchError
from giftai.interfaces.product_search import ProductSearchClient, is_excluded
from giftai.interfaces.rate_limiter import RateLimiter, NoopRateLimiter
from giftai.schemas.gift_schemas import GenerationTier


# ============================================
# Interest -> Search Phrases
# ============================================

# Every phrase contains its interest keyword so results never drift into a
# broader category ("cricket" must not become "sports").
INTEREST_SEARCH_PHRASES = {
    "cricket": [
        "cricket bat english willow",
        "cricket kit bag",
        "cricket batting gloves",
        "cricket helmet",
        "leather cricket ball",
        "cricket jersey india",
    ],
    "technology": [
        "technology gadgets for men",
        "smart technology home devices",
        "wearable technology fitness band",
        "latest technology wireless earbuds",
    ],
    "cooking": [
        "cooking utensils set",
        "cooking apron personalized",
        "indian cooking recipe book",
        "non stick cooking pan",
    ],
    "reading": [
        "reading light for books",
        "reading pillow with arms",
        "kindle reading device",
        "bookmark set for reading",
    ],
    "music": [
        "music bluetooth speaker",
        "music headphones wireless",
        "ukulele music instrument",
        "music vinyl record player",
    ],
    "photography": [
        "photography tripod stand",
        "photography ring light",
        "camera bag photography",
        "photography lens cleaning kit",
    ],
    "gaming": [
        "gaming mouse rgb",
        "gaming headset with mic",
        "gaming controller wireless",
        "gaming mousepad large",
    ],
    "fitness": [
        "fitness resistance bands",
        "fitness tracker watch",
        "fitness gym bag",
        "fitness yoga mat thick",
    ],
    "travel": [
        "travel backpack",
        "travel neck pillow",
        "travel organizer pouch",
        "travel adapter universal",
    ],
    "art": [
        "art supplies kit",
        "art sketchbook",
        "acrylic paint art set",
        "art easel for painting",
    ],
    "gardening": [
        "gardening tools set",
        "gardening gloves",
        "indoor gardening kit",
        "gardening planters ceramic",
    ],
    "fashion": [
        "fashion watch analog",
        "fashion sunglasses",
        "fashion leather wallet",
        "fashion handbag",
    ],
    "coffee": [
        "coffee mug personalized",
        "coffee french press",
        "coffee grinder manual",
        "coffee beans gift box",
    ],
    "yoga": [
        "yoga mat anti slip",
        "yoga blocks set",
        "yoga strap",
        "yoga meditation cushion",
    ],
    "football": [
        "football size 5",
        "football shoes studs",
        "football jersey",
        "football training cones",
    ],
    "badminton": [
        "badminton racket",
        "badminton shuttlecocks feather",
        "badminton kit bag",
        "badminton shoes",
    ],
    "tea": [
        "tea gift box assam",
        "tea infuser bottle",
        "tea cup set ceramic",
    ],
    "chess": [
        "chess board wooden",
        "magnetic travel chess set",
        "chess clock",
    ],
}

GENERIC_GIFT_PHRASES = [
    "personalized gift box",
    "scented candle gift set",
    "chocolate gift hamper",
    "photo frame personalized",
    "bluetooth speaker portable",
    "indoor plant with pot",
]

MAX_PHRASES = 10
RESULTS_PER_PHRASE = 5

REASONING_TEMPLATES = [
    "A thoughtful pick for someone who loves {interest}: practical, well reviewed and a great fit for a {occasion} gift.",
    "Chosen for their passion for {interest}. It is the kind of gift they will actually use and remember.",
    "Perfect for a {interest} enthusiast, and a great way to show your {relationship} you know what they enjoy.",
    "Matches their interest in {interest} and sits comfortably within your budget for this {occasion}.",
    "A popular choice among {interest} fans that makes a memorable {occasion} surprise.",
]


def stable_hash(title: str, index: int) -> int:
    """
    Process-independent hash of (title, index).

    Example:
        >>> stable_hash("Cricket Bat", 0) == stable_hash("Cricket Bat", 0)
        True
    """
    digest = hashlib.md5(f"{title}|{index}".encode("utf-8")).hexdigest()
    return int(digest[:8], 16)


def build_search_phrases(interests: Iterable[str]) -> List[str]:
    """
    Map interests to search phrases (case-insensitive).
    Unmapped interests are skipped; nothing mapped gives the generic set.
    Deduplicated in order and capped at MAX_PHRASES.
    """
    phrases: List[str] = []
    for interest in interests:
        key = (interest or "").strip().lower()
        phrases.extend(INTEREST_SEARCH_PHRASES.get(key, []))

    if not phrases:
        phrases = list(GENERIC_GIFT_PHRASES)

    seen = set()
    unique = []
    for phrase in phrases:
        if phrase not in seen:
            seen.add(phrase)
            unique.append(phrase)
    return unique[:MAX_PHRASES]


def _interest_for_phrase(phrase: str, interests: List[str]) -> str:
    lowered = phrase.lower()
    for interest in interests:
        if interest and interest.lower() in lowered:
            return interest
    return interests[0] if interests else "gifts"


def pick_reasoning(title: str, index: int, interest: str, occasion: str, relationship: str) -> str:
    template = REASONING_TEMPLATES[stable_hash(title, index) % len(REASONING_TEMPLATES)]
    return template.format(
        interest=interest,
        occasion=(occasion or "special occasion").lower(),
        relationship=relationship or "loved one",
    )


class RuleBasedGenerator:
    """
    Deterministic fallback tier

    Usage:
        generator = RuleBasedGenerator(search_client)
        result = await generator.generate_fallback(request, exclude_names=[])
    """

    def __init__(
        self,
        search_client: ProductSearchClient,
        rate_limiter: Optional[RateLimiter] = None,
        country: Optional[str] = None
    ):
        self.search_client = search_client
        self.rate_limiter = rate_limiter or NoopRateLimiter()
        self.country = country

    async def generate_fallback(
        self,
        request,
        exclude_names: Optional[List[str]] = None,
        max_phrases: Optional[int] = None
    ) -> TierResult:
        """
        Search a fixed phrase set and return one candidate per phrase

        Args:
            request: GiftFinderRequest-like object
            exclude_names: Titles already shown in the session
            max_phrases: Optional cap below MAX_PHRASES (used by refinement)

        Returns:
            TierResult: ok when at least one candidate was found
        """
        tier = GenerationTier.RULES.value
        phrases = build_search_phrases(request.interests)
        if max_phrases is not None:
            phrases = phrases[:max_phrases]

        excluded = list(exclude_names or [])
        candidates: List[ScoredCandidate] = []
        failures = 0

        logger.info(f"Rule-based generator: {len(phrases)} phrases for {list(request.interests)}")

        for index, phrase in enumerate(phrases):
            await self.rate_limiter.acquire()
            try:
                results = await self.search_client.search(
                    phrase, max_results=RESULTS_PER_PHRASE, country=self.country
                )
            except ProductSearchError as e:
                failures += 1
                logger.warning(f"Rule-based search failed for '{phrase}': {e}")
                continue

            product = next((r for r in results if not is_excluded(r.title, excluded)), None)
            if product is None:
                logger.debug(f"No new product for '{phrase}'")
                continue

            interest = _interest_for_phrase(phrase, list(request.interests))
            candidates.append(ScoredCandidate(
                product=product,
                reasoning=pick_reasoning(
                    product.title, index, interest, request.occasion, request.relationship
                ),
                relevance_score=70 + (5 if product.is_prime else 0) + (5 if product.is_best_seller else 0),
                tier=tier,
                search_phrase=phrase,
                category=interest,
            ))
            excluded.append(product.title)

        if not candidates:
            reason = "all searches failed" if failures == len(phrases) else "no new products found"
            logger.warning(f"Rule-based generator produced nothing ({reason})")
            return TierResult.failed(tier, reason)

        logger.info(f"Rule-based generator produced {len(candidates)} candidates")
        return TierResult(tier=tier, candidates=candidates)
