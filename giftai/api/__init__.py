# api/__init__.py
"""
API Endpoints Package

Contains all FastAPI routers for the service:
- recommendations: Sessions, load more, refine, personalized messages
- chat: Conversational gift finder
- gifts: Catalog browsing and trending
- wishlist: Wishlist and share links
"""

from typing import TYPE_CHECKING

# Lazy imports to avoid circular dependencies
if TYPE_CHECKING:
    from .recommendations import router as recommendations_router
    from .chat import router as chat_router
    from .gifts import router as gifts_router
    from .wishlist import router as wishlist_router

__all__ = [
    "recommendations_router",
    "chat_router",
    "gifts_router",
    "wishlist_router",
]
