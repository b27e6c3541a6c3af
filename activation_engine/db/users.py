"""Read access to the user directory."""

from enum import Enum
from typing import Any, TypeVar
from uuid import UUID

from activation_engine.core.logging import get_logger
from activation_engine.core.schemas_bna import AccessLevel, OnboardingStatus, UserProfile, UserRole
from activation_engine.db.supabase_client import get_supabase as get_client

logger = get_logger(__name__)

E = TypeVar("E", bound=Enum)


def _parse_enum(enum_cls: type[E], raw: Any, user_id: str, column: str) -> E | None:
    """Parse a directory value, treating values this service does not know as absent."""
    if raw is None:
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        logger.warning(f"Ignoring unknown {column} '{raw}'", extra={"user_id": user_id})
        return None


def get_user_profile(user_id: UUID | str) -> UserProfile | None:
    """
    Get the onboarding-relevant slice of a user record.

    Unknown onboarding states, access levels and roles are logged and read
    as absent so an unexpected directory value degrades to guidance.

    Returns:
        UserProfile, or None if no such user exists

    Raises:
        Exception: If the query itself fails
    """
    client = get_client()
    result = (
        client.table("users")
        .select("id, onboarding_status, access_level, role")
        .eq("id", str(user_id))
        .execute()
    )
    if not result.data:
        return None

    row = result.data[0]
    uid = str(row["id"])
    return UserProfile(
        id=uid,
        onboarding_status=_parse_enum(OnboardingStatus, row.get("onboarding_status"), uid, "onboarding_status"),
        access_level=_parse_enum(AccessLevel, row.get("access_level"), uid, "access_level") or AccessLevel.NONE,
        role=_parse_enum(UserRole, row.get("role"), uid, "role"),
    )
