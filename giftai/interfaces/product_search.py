# interfaces/product_search.py
"""
Product Search client (RapidAPI Real-Time Amazon Data)
Turns a short search phrase into a handful of purchasable products.
"""

import re
import asyncio
from dataclasses import dataclass, asdict
from typing import Optional, List, Dict, Any
import httpx
from loguru import logger

from giftai.config import settings
from giftai.errors import ProductSearchError


_PRICE_NUMBER = re.compile(r"[^0-9.]")


@dataclass
class ProductSearchResult:
    """One product returned by the search collaborator"""
    title: str
    price: str  # externally formatted, e.g. "₹1,299"
    currency: str = "INR"
    rating: Optional[float] = None
    rating_count: int = 0
    purchase_url: str = ""
    image_url: str = ""
    is_prime: bool = False
    is_best_seller: bool = False
    is_featured: bool = False
    external_id: Optional[str] = None
    marketplace: str = "amazon"

    @property
    def price_value(self) -> int:
        return parse_price(self.price)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_price(price: Optional[str]) -> int:
    """
    Parse an externally formatted price into whole rupees.

    Example:
        >>> parse_price("₹1,299.00")
        1299
        >>> parse_price("N/A")
        0
    """
    if not price:
        return 0
    digits = _PRICE_NUMBER.sub("", str(price))
    # "1.299.00" style leftovers keep only the first decimal point
    if digits.count(".") > 1:
        head, _, tail = digits.rpartition(".")
        digits = head.replace(".", "") + "." + tail
    try:
        return round(float(digits))
    except ValueError:
        return 0


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> int:
    """Rating counts arrive as ints or as strings like "1,234"."""
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        return int(float(value)) if value not in (None, "") else 0
    except (TypeError, ValueError, OverflowError):
        return 0


class ProductSearchClient:
    """
    Async client for the product search API.
    Retries with exponential backoff on HTTP 429; other failures raise
    ProductSearchError immediately.
    """

    def __init__(
        self,
        api_key: str = None,
        host: str = None,
        timeout: float = None,
        default_country: str = None,
        max_retries: int = 3,
        backoff_base: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = settings.RAPIDAPI_KEY if api_key is None else api_key
        self.host = host or settings.RAPIDAPI_HOST
        self.timeout = timeout or settings.SEARCH_TIMEOUT
        self.default_country = default_country or settings.SEARCH_COUNTRY
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def search(
        self,
        query: str,
        max_results: int = 10,
        country: Optional[str] = None
    ) -> List[ProductSearchResult]:
        """
        Search products for a phrase

        Args:
            query: Search phrase
            max_results: Maximum number of products to return
            country: Marketplace region (defaults to SEARCH_COUNTRY)

        Returns:
            List[ProductSearchResult]: Ranked products, possibly empty

        Raises:
            ProductSearchError: Missing key, HTTP error or invalid payload
        """
        if not self.configured:
            raise ProductSearchError("RAPIDAPI_KEY is not set")

        params = {"query": query, "page": "1", "country": country or self.default_country}
        headers = {"X-RapidAPI-Key": self.api_key, "X-RapidAPI-Host": self.host}
        url = f"https://{self.host}/search"

        last_error: Optional[ProductSearchError] = None
        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    response = await client.get(url, params=params, headers=headers)
            except httpx.HTTPError as e:
                raise ProductSearchError(f"Product search request failed: {e}") from e

            if response.status_code == 429:
                last_error = ProductSearchError("Product search rate limited", status_code=429)
                delay = self.backoff_base * (2 ** attempt)
                logger.warning(
                    f"Product search rate limited, retrying in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            if response.status_code >= 400:
                raise ProductSearchError(
                    f"Product search error: {response.status_code}",
                    status_code=response.status_code
                )

            return self._parse_response(response, max_results)

        raise last_error or ProductSearchError("Max retries exceeded")

    def _parse_response(self, response: httpx.Response, max_results: int) -> List[ProductSearchResult]:
        try:
            data = response.json()
        except ValueError as e:
            raise ProductSearchError("Product search returned invalid JSON") from e

        if not isinstance(data, dict):
            raise ProductSearchError("Invalid response from product search")
        products = (data.get("data") or {}).get("products")
        if data.get("status") != "OK" or products is None:
            raise ProductSearchError("Invalid response from product search")

        results: List[ProductSearchResult] = []
        for item in products[:max_results]:
            title = (item.get("product_title") or "").strip()
            if not title:
                continue
            results.append(ProductSearchResult(
                title=title,
                price=item.get("product_price") or "N/A",
                currency=item.get("currency") or "INR",
                rating=_to_float(item.get("product_star_rating")),
                rating_count=_to_int(item.get("product_num_ratings")),
                purchase_url=item.get("product_url") or "",
                image_url=item.get("product_photo") or "",
                is_prime=bool(item.get("is_prime")),
                is_best_seller=bool(item.get("is_best_seller")),
                is_featured=bool(item.get("is_amazon_choice")),
                external_id=item.get("asin"),
            ))

        logger.debug(f"Product search returned {len(results)} products")
        return results


def titles_match(title: str, name: str) -> bool:
    """Case-insensitive substring match in either direction"""
    a = (title or "").strip().lower()
    b = (name or "").strip().lower()
    if not a or not b:
        return False
    return a in b or b in a


def is_excluded(title: str, exclude_names: List[str]) -> bool:
    return any(titles_match(title, name) for name in exclude_names)
