# llm/message_writer.py
"""
Personalized Message Writer
Writes the short card message attached to a recommendation.
Falls back to a template whenever the LLM is unavailable.
"""

from typing import Optional
from loguru import logger

from giftai.config import settings
from giftai.errors import SuggestionServiceError
from giftai.llm.client import LLMClient
from giftai.llm.prompts import MESSAGE_SYSTEM_PROMPT, MESSAGE_PROMPT


class PersonalizedMessageWriter:
    """Generates gift messages; never raises for collaborator failures"""

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def write(self, recommendation, product) -> str:
        """
        Write a 2-4 sentence message for a recommendation

        Args:
            recommendation: GiftRecommendation with the request facts
            product: GiftProduct being gifted

        Returns:
            str: Message body (LLM output or template)
        """
        recipient = recommendation.recipient_name or "them"

        if self.llm.enabled:
            profile_lines = [f"Relationship: {recommendation.relationship or 'someone special'}"]
            if recommendation.recipient_age:
                profile_lines.append(f"Age: {recommendation.recipient_age}")
            profile_lines.append(f"Interests: {', '.join(recommendation.interests or [])}")
            if recommendation.personality:
                profile_lines.append(f"Personality: {recommendation.personality}")
            profile_lines.append(f"Occasion: {recommendation.occasion or 'a special day'}")

            try:
                message = await self.llm.complete_text(
                    MESSAGE_SYSTEM_PROMPT,
                    MESSAGE_PROMPT.format(
                        recipient=recipient,
                        profile="\n".join(profile_lines),
                        gift=f"{product.name} - {product.description}",
                        reasoning=recommendation.ai_reasoning or "",
                    ),
                    timeout=settings.MESSAGE_TIMEOUT,
                )
                return message
            except SuggestionServiceError as e:
                logger.warning(f"Message generation failed, using template: {e}")

        return template_message(recommendation.recipient_name, recommendation.occasion, product.name)


def template_message(recipient_name: Optional[str], occasion: Optional[str], product_name: str) -> str:
    """
    Example:
        >>> template_message("Rahul", "Birthday", "Cricket Bat")
        'Rahul, I hope this Cricket Bat brings you as much joy as you bring to everyone around you. Happy Birthday!'
    """
    prefix = f"{recipient_name}, I" if recipient_name else "I"
    closing = f"Happy {occasion}!" if occasion else "Enjoy!"
    return (
        f"{prefix} hope this {product_name} brings you as much joy as you bring "
        f"to everyone around you. {closing}"
    )
