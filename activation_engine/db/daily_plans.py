"""Read access to per-user daily plan snapshots.

The daily plan subsystem owns the ``user_daily_plans`` table and has
already applied completion and prerequisite filtering; this module only
reads the most recent snapshot.
"""

from typing import Any
from uuid import UUID

from activation_engine.core.errors import DailyPlanUnavailableError
from activation_engine.core.logging import get_logger
from activation_engine.core.schemas_bna import ActionKey, DailyPlan
from activation_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def _parse_action_keys(raw: Any, user_id: str, column: str) -> list[ActionKey]:
    """Parse a stored key list, dropping keys this service does not know."""
    if not raw:
        return []
    if isinstance(raw, str):
        # simple-array columns come back comma separated
        raw = [part for part in raw.split(",") if part]

    keys: list[ActionKey] = []
    for value in raw:
        try:
            keys.append(ActionKey(value))
        except ValueError:
            logger.warning(
                f"Ignoring unknown action key '{value}' in {column}",
                extra={"user_id": user_id},
            )
    return keys


def get_daily_plan(user_id: UUID | str) -> DailyPlan:
    """
    Get the latest daily plan snapshot for a user.

    Args:
        user_id: User UUID

    Returns:
        DailyPlan with required and completed action keys, in stored order

    Raises:
        DailyPlanUnavailableError: If no plan exists or the query fails
    """
    try:
        supabase = get_supabase()
        response = (
            supabase.table("user_daily_plans")
            .select("required_actions, completed_actions, date")
            .eq("user_id", str(user_id))
            .order("date", desc=True)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.error(
            f"Failed to load daily plan for user {user_id}: {e}",
            extra={"user_id": str(user_id)},
        )
        raise DailyPlanUnavailableError(str(user_id), str(e)) from e

    if not response.data:
        raise DailyPlanUnavailableError(str(user_id))

    row = response.data[0]
    return DailyPlan(
        required_actions=_parse_action_keys(row.get("required_actions"), str(user_id), "required_actions"),
        completed_actions=_parse_action_keys(row.get("completed_actions"), str(user_id), "completed_actions"),
    )
