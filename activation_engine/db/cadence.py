"""Global cadence day lookup."""

from activation_engine.core.config import get_settings
from activation_engine.core.errors import CadenceUnavailableError
from activation_engine.core.logging import get_logger
from activation_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def _validate_day(value: object) -> int:
    settings = get_settings()
    try:
        day = int(value)
    except (TypeError, ValueError):
        raise CadenceUnavailableError(f"Invalid cadence day value: {value!r}") from None

    if day < settings.CADENCE_DAY_MIN or day > settings.CADENCE_DAY_MAX:
        raise CadenceUnavailableError(
            f"Cadence day {day} outside {settings.CADENCE_DAY_MIN}-{settings.CADENCE_DAY_MAX}"
        )
    return day


def get_cadence_day() -> int:
    """
    Get the current global cadence day (not per user).

    CADENCE_DAY_OVERRIDE wins when set; otherwise the most recent row of
    ``cadence_cycles`` is used.

    Returns:
        Day number within the program range

    Raises:
        CadenceUnavailableError: If the day is missing or out of range
    """
    settings = get_settings()
    if settings.CADENCE_DAY_OVERRIDE is not None:
        return _validate_day(settings.CADENCE_DAY_OVERRIDE)

    supabase = get_supabase()
    try:
        response = (
            supabase.table("cadence_cycles")
            .select("cycle_id, cadence_day")
            .order("updated_at", desc=True)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.error(f"Failed to fetch cadence day: {e}")
        raise CadenceUnavailableError(f"Cadence lookup failed: {e}") from e

    if not response.data:
        raise CadenceUnavailableError("No cadence cycle configured")

    return _validate_day(response.data[0].get("cadence_day"))
