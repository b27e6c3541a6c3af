"""Flow bar API - best next action and its recommendation history."""

import asyncio
from datetime import date
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Body, HTTPException, Query

from activation_engine.core.bna_resolver import record_recommendation, resolve_best_next_action
from activation_engine.core.config import get_settings
from activation_engine.core.errors import CadenceUnavailableError
from activation_engine.core.logging import get_logger
from activation_engine.core.schemas_bna import (
    BNARecommendation,
    RecommendationRecord,
    RecommendationStatusUpdate,
)
from activation_engine.db.action_recommendations import (
    list_recommendations,
    update_recommendation_status,
)

logger = get_logger(__name__)

router = APIRouter()


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/users/{user_id}/best-next-action", response_model=BNARecommendation)
async def get_best_next_action(
    user_id: UUID,
    background_tasks: BackgroundTasks,
    context: str | None = Query(
        None, max_length=50, description="UI context, e.g. 'dashboard' (audit only)"
    ),
):
    """
    Get the single best next action for a user.

    Returns either an actionable recommendation or supportive guidance when
    there is nothing to do right now. The resolution is bounded by
    BNA_RESOLVE_TIMEOUT_SECONDS; the audit write runs after the response.
    """
    settings = get_settings()
    try:
        recommendation = await asyncio.wait_for(
            resolve_best_next_action(user_id, context, persist=False),
            timeout=settings.BNA_RESOLVE_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error(f"Best next action timed out for user {user_id}")
        raise HTTPException(status_code=504, detail="Recommendation timed out")
    except CadenceUnavailableError as e:
        logger.error(f"Cadence unavailable while resolving for user {user_id}: {e}")
        raise HTTPException(status_code=503, detail="Cadence schedule unavailable")
    except Exception as e:
        logger.exception(f"Failed to resolve best next action for user {user_id}")
        raise HTTPException(status_code=500, detail=str(e))

    if settings.BNA_PERSIST_RECOMMENDATIONS:
        background_tasks.add_task(record_recommendation, str(user_id), recommendation, context)
    return recommendation


@router.get("/users/{user_id}/recommendations", response_model=list[RecommendationRecord])
async def get_recommendation_history(
    user_id: UUID,
    on_date: date | None = Query(None, alias="date", description="YYYY-MM-DD"),
    context: str | None = Query(None, max_length=50),
    limit: int = Query(50, ge=1, le=200),
):
    """List recommendations previously presented to a user, newest first."""
    try:
        return await asyncio.to_thread(list_recommendations, user_id, on_date, context, limit)
    except Exception as e:
        logger.exception(f"Failed to list recommendations for user {user_id}")
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/recommendations/{recommendation_id}/status", response_model=RecommendationRecord)
async def set_recommendation_status(
    recommendation_id: UUID,
    body: RecommendationStatusUpdate = Body(...),
):
    """Record that a recommendation was accepted, dismissed or completed."""
    try:
        record = await asyncio.to_thread(update_recommendation_status, recommendation_id, body.status)
    except Exception as e:
        logger.exception(f"Failed to update recommendation {recommendation_id}")
        raise HTTPException(status_code=500, detail=str(e))

    if record is None:
        raise HTTPException(status_code=404, detail="Recommendation not found")
    return record
