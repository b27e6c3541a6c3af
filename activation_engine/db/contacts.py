"""Read access to CRM contacts awaiting follow-up."""

from uuid import UUID

from activation_engine.core.logging import get_logger
from activation_engine.core.schemas_bna import FollowUpContact
from activation_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)

FOLLOW_UP_STAGE = "follow_up"


def list_follow_up_contacts(user_id: UUID | str, limit: int = 10) -> list[FollowUpContact]:
    """
    List a user's contacts in the follow-up pipeline stage.

    Longest-neglected first: ordered by last_activity_at ascending, ties by
    id so repeated calls return the same order.

    Args:
        user_id: Owning user UUID
        limit: Maximum contacts to return

    Returns:
        List of FollowUpContact

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("contacts")
            .select("id, name, last_activity_at")
            .eq("user_id", str(user_id))
            .eq("pipeline_stage", FOLLOW_UP_STAGE)
            .order("last_activity_at")
            .order("id")
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.error(
            f"Failed to list follow-up contacts for user {user_id}: {e}",
            extra={"user_id": str(user_id)},
        )
        raise

    return [FollowUpContact(**row) for row in response.data or []]
