# api/recommendations.py
"""
/recommendations HTTP API Endpoints

POST /api/recommendations - Create a session from a gift-finder request
POST /api/recommendations/{session_id}/more - Load more (live search, then the catalog)
GET /api/recommendations/{session_id} - Stored recommendations of a session
POST /api/recommendations/{session_id}/refine - Chat-driven refinement
POST /api/message - Regenerate the personalized message of a recommendation
"""

from typing import Optional, List, Dict, Any
from fastapi import APIRouter, HTTPException, Depends, Body
from loguru import logger

from giftai.agents.session_assembler import SessionAssembler
from giftai.api.deps import get_assembler
from giftai.errors import (
    NoRecommendationsFound,
    SessionNotFound,
    SessionExhausted,
    RecommendationNotFound,
)
from giftai.schemas.gift_schemas import (
    GiftFinderRequest,
    RecommendationsResponse,
    RefineRequest,
    RefineResponse,
    MessageRequest,
    MessageResponse,
)


router = APIRouter(prefix="/api", tags=["recommendations"])


# ============================================
# Recommendations
# ============================================

@router.post("/recommendations", response_model=RecommendationsResponse)
async def create_recommendations(
    request: GiftFinderRequest,
    assembler: SessionAssembler = Depends(get_assembler)
):
    """Generate the first batch of recommendations for a new session"""
    logger.info(f"New recommendation request: interests={request.interests} budget={request.budget}")
    try:
        batch = await assembler.create_session(request)
    except NoRecommendationsFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to generate recommendations: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate recommendations")
    return RecommendationsResponse(**batch.to_dict())


@router.post("/recommendations/{session_id}/more", response_model=RecommendationsResponse)
async def more_recommendations(
    session_id: str,
    request: Optional[GiftFinderRequest] = Body(None),
    assembler: SessionAssembler = Depends(get_assembler)
):
    """Load more recommendations, never repeating a product"""
    try:
        batch = await assembler.extend_session(session_id, request)
    except SessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionExhausted as e:
        raise HTTPException(status_code=404, detail={"error": str(e), "exhausted": True})
    except Exception as e:
        logger.exception(f"Failed to load more recommendations for {session_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate more recommendations")
    return RecommendationsResponse(**batch.to_dict())


@router.get("/recommendations/{session_id}", response_model=List[Dict[str, Any]])
async def get_recommendations(
    session_id: str,
    assembler: SessionAssembler = Depends(get_assembler)
):
    return assembler.get_session(session_id)


@router.post("/recommendations/{session_id}/refine", response_model=RefineResponse)
async def refine_recommendations(
    session_id: str,
    request: RefineRequest,
    assembler: SessionAssembler = Depends(get_assembler)
):
    """Add a few recommendations that follow the user's refinement message"""
    try:
        acknowledgement, recommendations = await assembler.refine_session(
            session_id,
            request.message,
            recipient_name=request.recipientName,
            recipient_age=request.recipientAge,
            personality=request.personality,
        )
    except SessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to refine session {session_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to refine recommendations")
    return RefineResponse(response=acknowledgement, newRecommendations=recommendations)


# ============================================
# Personalized Message
# ============================================

@router.post("/message", response_model=MessageResponse)
async def regenerate_message(
    request: MessageRequest,
    assembler: SessionAssembler = Depends(get_assembler)
):
    """Always writes a fresh message and overwrites the stored one"""
    try:
        message, recommendation = await assembler.regenerate_message(request.recommendationId)
    except RecommendationNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to generate message: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate message")
    return MessageResponse(message=message, recommendation=recommendation)
