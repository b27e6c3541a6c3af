"""Pydantic models for the Best Next Action (BNA) resolver.

Pipeline:
  DailyPlan + FollowUpContact → CandidateAction (frozen, per call)
  → hard constraints → cadence bias → tie-break → BNARecommendation

BNARecommendation is a discriminated union on ``kind``:
  - ActionableRecommendation: exactly one action for the user to take
  - SupportiveGuidance: nothing to do right now, with a reason and message
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================


class ActionType(str, Enum):
    """Every action the resolver can recommend."""

    # Document uploads
    UPLOAD_LICENSE = "upload_license"
    UPLOAD_EO = "upload_e&o"
    UPLOAD_CONTRACT = "upload_contract"

    # Onboarding tasks
    COMPLETE_LICENSED_INTAKE = "complete_licensed_intake"
    SCHEDULE_EXAM = "schedule_exam"
    COMPLETE_PROFILE = "complete_profile"

    # Affiliate tasks
    SUBMIT_AFFILIATE_PROFILE = "submit_affiliate_profile"
    GENERATE_REFERRAL_LINK = "generate_referral_link"
    SHARE_REFERRAL_LINK = "share_referral_link"

    # Operational
    FOLLOW_UP_CONTACT = "follow_up_contact"

    # System
    UNLOCK_ACTIVATION = "unlock_activation"


class ActionKey(str, Enum):
    """Step identifiers owned by the daily plan subsystem."""

    ACCOUNT_CREATED = "account_created"
    LICENSED_CHECK = "licensed_check"
    EXAM_SCHEDULED = "exam_scheduled"
    LICENSE_UPLOADED = "license_uploaded"
    LICENSED_AGENT_INTAKE = "licensed_agent_intake"
    EO_UPLOADED = "e&o_uploaded"
    ACTIVATION_UNLOCKED = "activation_unlocked"
    AFFILIATE_PROFILE_SUBMITTED = "affiliate_profile_submitted"
    REFERRAL_LINK_GENERATED = "referral_link_generated"
    FIRST_SHARE = "first_share"


class ActionCategory(str, Enum):
    """Precedence class. Declaration order is precedence order."""

    BLOCKER = "BLOCKER"  # Compliance / progress blocking
    REQUIRED = "REQUIRED"  # Needed to finish the journey
    OPS = "OPS"  # Ongoing CRM work


class PriorityBand(str, Enum):
    """Tie-break within a category. Declaration order is precedence order."""

    HIGH = "HIGH"
    MED = "MED"
    LOW = "LOW"


class ActionReasonCode(str, Enum):
    """Why an actionable recommendation was chosen."""

    BLOCKER = "BLOCKER"
    REQUIRED = "REQUIRED"
    CADENCE_ALIGNED = "CADENCE_ALIGNED"
    OPS = "OPS"


class GuidanceReasonCode(str, Enum):
    """Why no action was recommended."""

    WAITING_ON_APPROVAL = "WAITING_ON_APPROVAL"  # External review pending
    NO_ACTIONS_AVAILABLE = "NO_ACTIONS_AVAILABLE"  # Nothing left to do right now
    SYSTEM_LIMIT = "SYSTEM_LIMIT"  # Profile or plan could not be loaded


class RecommendationStatus(str, Enum):
    """Lifecycle of a persisted recommendation."""

    PRESENTED = "PRESENTED"
    ACCEPTED = "ACCEPTED"
    DISMISSED = "DISMISSED"
    COMPLETED = "COMPLETED"


class OnboardingStatus(str, Enum):
    """Coarse onboarding state from the user directory."""

    IN_PROGRESS = "in_progress"
    LICENSED = "licensed"
    PENDING_ACTIVATION = "pending_activation"
    ONBOARDED = "onboarded"


class UserRole(str, Enum):
    AGENT = "agent"
    AFFILIATE = "affiliate"
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"


class AccessLevel(str, Enum):
    FULL = "full"
    NONE = "none"


# =============================================================================
# Static configuration records
# =============================================================================


class ActionMetadata(BaseModel):
    """Static description of one ActionType."""

    model_config = ConfigDict(frozen=True)

    category: ActionCategory
    priority_band: PriorityBand
    unblock_score: int = Field(ge=0, le=5)  # how many later actions this unlocks
    cta_template: str  # may contain {placeholders}


# =============================================================================
# Collaborator views (read-only inputs)
# =============================================================================


class DailyPlan(BaseModel):
    """Snapshot from the daily plan subsystem, already prerequisite-filtered."""

    required_actions: list[ActionKey] = Field(default_factory=list)
    completed_actions: list[ActionKey] = Field(default_factory=list)

    @property
    def last_completed_action(self) -> ActionKey | None:
        return self.completed_actions[-1] if self.completed_actions else None


class UserProfile(BaseModel):
    """The slice of the user record the resolver needs."""

    id: str
    onboarding_status: OnboardingStatus | None = None
    access_level: AccessLevel = AccessLevel.NONE
    role: UserRole | None = None

    @property
    def is_onboarded(self) -> bool:
        return self.onboarding_status == OnboardingStatus.ONBOARDED


class FollowUpContact(BaseModel):
    """A CRM contact sitting in the follow-up pipeline stage."""

    id: str
    name: str | None = None
    last_activity_at: datetime | None = None


# =============================================================================
# Per-call candidate
# =============================================================================


class CandidateAction(BaseModel):
    """A potentially recommendable action, built fresh on every resolution.

    Category, band and score are copied from ActionMetadata when the
    candidate is built and never change afterwards.
    """

    model_config = ConfigDict(frozen=True)

    action_type: ActionType
    category: ActionCategory
    priority_band: PriorityBand
    unblock_score: int = Field(ge=0, le=5)
    target_id: str | None = None  # e.g. contact id for FOLLOW_UP_CONTACT
    sequence_index: int = Field(ge=0)  # discovery order, final tie-break


# =============================================================================
# Recommendation union
# =============================================================================


class ActionableContext(BaseModel):
    category: ActionCategory
    priority_band: PriorityBand
    unblock_score: int = Field(ge=0, le=5)
    cadence_aligned: bool
    explanation: str


class ActionableRecommendation(BaseModel):
    """One concrete action for the user."""

    kind: Literal["actionable"] = "actionable"
    action_type: ActionType
    target_id: str | None = None
    reason_code: ActionReasonCode
    cta: str
    context: ActionableContext


class GuidanceContext(BaseModel):
    user_state: str
    last_action_completed: ActionKey | None = None
    blocking_reason: str | None = None


class SupportiveGuidance(BaseModel):
    """Non-actionable message returned when no candidate survives."""

    kind: Literal["supportive_guidance"] = "supportive_guidance"
    reason_code: GuidanceReasonCode
    message: str
    context: GuidanceContext


BNARecommendation = Annotated[
    Union[ActionableRecommendation, SupportiveGuidance],
    Field(discriminator="kind"),
]


# =============================================================================
# Audit records
# =============================================================================


class RecommendationRecord(BaseModel):
    """Persisted copy of a resolved recommendation."""

    id: str
    user_id: str
    date: date
    context: str | None = None
    recommendation: BNARecommendation
    status: RecommendationStatus = RecommendationStatus.PRESENTED
    created_at: datetime | None = None
    status_updated_at: datetime | None = None
    completed_at: datetime | None = None


class RecommendationStatusUpdate(BaseModel):
    """Request body for moving a recommendation through its lifecycle."""

    status: RecommendationStatus
