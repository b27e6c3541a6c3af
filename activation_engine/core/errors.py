"""Exception types raised by the Activation Engine."""


class ActivationEngineError(Exception):
    """Base class for engine errors."""


class ActionConfigError(ActivationEngineError):
    """Static action tables are out of sync (missing metadata or mapping)."""


class DailyPlanUnavailableError(ActivationEngineError):
    """The daily plan for a user could not be loaded."""

    def __init__(self, user_id: str, reason: str = "no plan found"):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"Daily plan unavailable for user {user_id}: {reason}")


class CadenceUnavailableError(ActivationEngineError):
    """The global cadence day is missing or outside the program range."""
