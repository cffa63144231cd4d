# api/chat.py
"""
/chat HTTP API Endpoint
Conversational gift finder: extracts recipient facts turn by turn.

POST /api/chat - One chat turn
"""

from fastapi import APIRouter, Depends

from giftai.api.deps import get_chat_assistant
from giftai.llm.chat_assistant import ChatAssistant
from giftai.schemas.gift_schemas import ChatRequest, ChatResponse


router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    assistant: ChatAssistant = Depends(get_chat_assistant)
):
    return await assistant.reply(request.message, request.conversationState)
