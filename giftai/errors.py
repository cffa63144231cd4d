"""
Domain exceptions for the GiftAI service.

Upstream errors are raised by the collaborator clients and absorbed by the
generation tiers. The not-found family is raised by the session assembler and
mapped to HTTP 404 by the routers.
"""


class GiftAIError(Exception):
    """Base class for all service errors"""


class UpstreamError(GiftAIError):
    """An external collaborator failed, timed out or answered garbage"""


class SuggestionServiceError(UpstreamError):
    """Generative-language API failure"""


class ProductSearchError(UpstreamError):
    """Product search API failure"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class NoRecommendationsFound(GiftAIError):
    """Neither generation tier produced a single candidate"""


class SessionNotFound(GiftAIError):
    """The session has no stored recommendations"""


class SessionExhausted(GiftAIError):
    """'Load more' found nothing new for an existing session"""


class RecommendationNotFound(GiftAIError):
    """Recommendation id (or its product) is unknown"""
