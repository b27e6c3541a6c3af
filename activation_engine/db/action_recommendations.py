"""Audit trail of resolved recommendations (``action_recommendations`` table).

One row is appended per resolution. Uniqueness of (user, date, context) is
not enforced here.
"""

from datetime import date, datetime, timezone
from typing import Any
from uuid import UUID

from activation_engine.core.logging import get_logger
from activation_engine.core.schemas_bna import (
    BNARecommendation,
    RecommendationRecord,
    RecommendationStatus,
)
from activation_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def insert_recommendation(
    user_id: UUID | str,
    recommendation: BNARecommendation,
    context: str | None = None,
    on_date: date | None = None,
) -> RecommendationRecord:
    """
    Persist a resolved recommendation with status PRESENTED.

    Args:
        user_id: User UUID
        recommendation: Actionable recommendation or supportive guidance
        context: Optional UI context string (e.g. "dashboard")
        on_date: Calendar date for the record (defaults to today, UTC)

    Returns:
        The stored RecommendationRecord

    Raises:
        ValueError: If the insert returns no row
    """
    supabase = get_supabase()
    on_date = on_date or datetime.now(timezone.utc).date()

    row = {
        "user_id": str(user_id),
        "date": on_date.isoformat(),
        "context": context,
        "recommendation": recommendation.model_dump(mode="json"),
        "status": RecommendationStatus.PRESENTED.value,
    }

    response = supabase.table("action_recommendations").insert(row).execute()
    if not response.data:
        raise ValueError("No data returned from action_recommendations insert")

    record = RecommendationRecord(**response.data[0])
    logger.debug(
        f"Stored recommendation {record.id} ({recommendation.kind})",
        extra={"user_id": str(user_id)},
    )
    return record


def list_recommendations(
    user_id: UUID | str,
    on_date: date | None = None,
    context: str | None = None,
    limit: int = 50,
) -> list[RecommendationRecord]:
    """List stored recommendations for a user, newest first."""
    supabase = get_supabase()

    query = (
        supabase.table("action_recommendations")
        .select("*")
        .eq("user_id", str(user_id))
    )
    if on_date:
        query = query.eq("date", on_date.isoformat())
    if context:
        query = query.eq("context", context)

    response = query.order("created_at", desc=True).limit(limit).execute()
    return [RecommendationRecord(**row) for row in response.data or []]


def update_recommendation_status(
    recommendation_id: UUID | str,
    status: RecommendationStatus,
) -> RecommendationRecord | None:
    """
    Move a recommendation through its lifecycle.

    Stamps status_updated_at; COMPLETED also stamps completed_at.

    Returns:
        Updated record, or None if the id does not exist
    """
    supabase = get_supabase()
    now = datetime.now(timezone.utc).isoformat()

    update_data: dict[str, Any] = {
        "status": status.value,
        "status_updated_at": now,
    }
    if status == RecommendationStatus.COMPLETED:
        update_data["completed_at"] = now

    response = (
        supabase.table("action_recommendations")
        .update(update_data)
        .eq("id", str(recommendation_id))
        .execute()
    )
    if not response.data:
        return None

    logger.info(f"Recommendation {recommendation_id} marked {status.value}")
    return RecommendationRecord(**response.data[0])
