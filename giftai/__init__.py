# giftai/__init__.py
"""
GiftAI Recommendation Service Package

Gift recommendations for a recipient profile with:
- AI suggestions turned into real products (product search)
- Deterministic rule-based fallback
- Catalog "load more" with relevance scoring
- Personalized messages, chat refinement, wishlists and sharing
"""

__version__ = "1.0.0"

# Package structure:
# giftai/
# ├── __init__.py           <- This file
# ├── main.py               <- FastAPI application entry
# ├── config.py             <- Configuration settings
# ├── errors.py             <- Domain exceptions
# │
# ├── algorithms/           <- Relevance scoring
# ├── agents/               <- Generation tiers + session assembler
# ├── api/                  <- FastAPI Routers (/api/recommendations, /api/chat, ...)
# ├── interfaces/           <- Storage, product search, rate limiting
# ├── llm/                  <- LLM client, prompts, message writer, chat
# ├── schemas/              <- Pydantic models + SQLModel tables
# └── data/                 <- Curated catalog seed
