"""Best Next Action resolver: one recommendation per user, deterministically.

Four pure stages composed in order, each taking and returning a tuple of
frozen CandidateAction values:

1. build_candidate_pool()      daily plan required actions, then follow-ups
2. apply_hard_constraints()    completed / already-activated / not-onboarded
3. apply_cadence_alignment()   category bias by cadence day, fallback to all
4. resolve_tie_break()         category > band > unblock score > sequence

resolve_best_next_action() fetches the collaborators, runs the stages and
falls back to build_supportive_guidance() when nothing survives stage 2.
No LLM, no writes in the decision path.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from uuid import UUID

from activation_engine.core.action_config import (
    ACTIVATION_ACTION,
    FOLLOW_UP_ACTION,
    action_key_for_type,
    action_type_for_key,
    get_action_metadata,
)
from activation_engine.core.config import get_settings
from activation_engine.core.errors import DailyPlanUnavailableError
from activation_engine.core.logging import get_logger, log_with_context
from activation_engine.core.schemas_bna import (
    ActionableContext,
    ActionableRecommendation,
    ActionCategory,
    ActionKey,
    ActionReasonCode,
    ActionType,
    BNARecommendation,
    CandidateAction,
    DailyPlan,
    FollowUpContact,
    GuidanceContext,
    GuidanceReasonCode,
    OnboardingStatus,
    PriorityBand,
    SupportiveGuidance,
    UserProfile,
)
from activation_engine.db.action_recommendations import insert_recommendation
from activation_engine.db.cadence import get_cadence_day
from activation_engine.db.contacts import list_follow_up_contacts
from activation_engine.db.daily_plans import get_daily_plan
from activation_engine.db.users import get_user_profile

logger = get_logger(__name__)

# ============================================================================
# Constants
# ============================================================================

CATEGORY_PRECEDENCE: tuple[ActionCategory, ...] = (
    ActionCategory.BLOCKER,
    ActionCategory.REQUIRED,
    ActionCategory.OPS,
)

BAND_PRECEDENCE: tuple[PriorityBand, ...] = (
    PriorityBand.HIGH,
    PriorityBand.MED,
    PriorityBand.LOW,
)

# Days 1..N keep new users on onboarding; OPS waits until after
EARLY_CADENCE_LAST_DAY = 3

DEFAULT_FOLLOW_UP_LIMIT = 10

# Keyed by reason, not action type
EXPLANATIONS: dict[ActionReasonCode, str] = {
    ActionReasonCode.BLOCKER: "This action is blocking your progress and must be completed first.",
    ActionReasonCode.REQUIRED: "This action is required to complete your onboarding.",
    ActionReasonCode.CADENCE_ALIGNED: "This action aligns with today's focus (Day {day} of the cadence).",
    ActionReasonCode.OPS: "This operational task is ready for your attention.",
}

UNNAMED_CONTACT = "your contact"

GUIDANCE_USER_NOT_FOUND = "Unable to load your profile. Please contact support."
GUIDANCE_PLAN_UNAVAILABLE = "Your plan is temporarily unavailable. Please check back shortly."
GUIDANCE_WAITING_ON_APPROVAL = "Your application is under review. We will notify you once approved."
GUIDANCE_ALL_CAUGHT_UP = "You're all caught up! No pending actions at this time."
GUIDANCE_GREAT_PROGRESS = "Great progress! You've completed all available actions for now."


# ============================================================================
# Stage 1: candidate pool
# ============================================================================


def _candidate(
    action_type: ActionType,
    sequence_index: int,
    target_id: str | None = None,
) -> CandidateAction:
    metadata = get_action_metadata(action_type)
    return CandidateAction(
        action_type=action_type,
        category=metadata.category,
        priority_band=metadata.priority_band,
        unblock_score=metadata.unblock_score,
        target_id=target_id,
        sequence_index=sequence_index,
    )


def build_candidate_pool(
    plan: DailyPlan,
    follow_up_contacts: Sequence[FollowUpContact],
    max_follow_ups: int = DEFAULT_FOLLOW_UP_LIMIT,
) -> tuple[CandidateAction, ...]:
    """Assemble candidates in discovery order.

    Plan-derived candidates come first, in required_actions order; keys with
    no ActionType (system milestones) are skipped. Each follow-up contact then
    yields one FOLLOW_UP_CONTACT candidate targeting that contact, in the
    order given (oldest activity first). Sequence indices start at 0 and
    increase by one per candidate.
    """
    candidates: list[CandidateAction] = []

    for action_key in plan.required_actions:
        action_type = action_type_for_key(action_key)
        if action_type is None:
            continue
        candidates.append(_candidate(action_type, len(candidates)))

    for contact in follow_up_contacts[:max_follow_ups]:
        candidates.append(_candidate(FOLLOW_UP_ACTION, len(candidates), target_id=contact.id))

    return tuple(candidates)


# ============================================================================
# Stage 2: hard constraints
# ============================================================================


def _is_permitted(candidate: CandidateAction, completed: set[ActionKey], user: UserProfile) -> bool:
    action_key = action_key_for_type(candidate.action_type)
    if action_key is not None and action_key in completed:
        return False

    # Onboarding state is authoritative for activation; the access flag is not
    if candidate.action_type == ACTIVATION_ACTION and user.is_onboarded:
        return False

    if candidate.category == ActionCategory.OPS and not user.is_onboarded:
        return False

    return True


def apply_hard_constraints(
    candidates: Sequence[CandidateAction],
    plan: DailyPlan,
    user: UserProfile | None,
) -> tuple[CandidateAction, ...]:
    """Drop candidates that are completed, already satisfied or not allowed yet.

    An unknown user yields no candidates, which routes the caller to
    supportive guidance instead of a confident but wrong recommendation.
    """
    if user is None:
        return ()

    completed = set(plan.completed_actions)
    return tuple(c for c in candidates if _is_permitted(c, completed, user))


# ============================================================================
# Stage 3: cadence alignment
# ============================================================================


def is_cadence_aligned(
    candidate: CandidateAction,
    cadence_day: int,
    early_last_day: int = EARLY_CADENCE_LAST_DAY,
) -> bool:
    """Category-level timing bias.

    Blockers are always aligned. Early days align only REQUIRED; later days
    align everything.
    """
    if candidate.category == ActionCategory.BLOCKER:
        return True
    if cadence_day <= early_last_day:
        return candidate.category == ActionCategory.REQUIRED
    return True


def apply_cadence_alignment(
    candidates: Sequence[CandidateAction],
    cadence_day: int,
    early_last_day: int = EARLY_CADENCE_LAST_DAY,
) -> tuple[CandidateAction, ...]:
    """Keep aligned candidates; if none are aligned, keep them all."""
    aligned = tuple(c for c in candidates if is_cadence_aligned(c, cadence_day, early_last_day))
    return aligned if aligned else tuple(candidates)


# ============================================================================
# Stage 4: tie-break
# ============================================================================


def _keep_best(candidates: list[CandidateAction], attr: str, precedence: Sequence) -> list[CandidateAction]:
    """Narrow to candidates sharing the first value in precedence that is present."""
    present = {getattr(c, attr) for c in candidates}
    best = next(value for value in precedence if value in present)
    return [c for c in candidates if getattr(c, attr) == best]


def select_winner(candidates: Sequence[CandidateAction]) -> CandidateAction:
    """Reduce a non-empty candidate set to exactly one.

    Raises:
        ValueError: If candidates is empty
    """
    if not candidates:
        raise ValueError("select_winner requires at least one candidate")

    remaining = _keep_best(list(candidates), "category", CATEGORY_PRECEDENCE)
    remaining = _keep_best(remaining, "priority_band", BAND_PRECEDENCE)

    top_score = max(c.unblock_score for c in remaining)
    remaining = [c for c in remaining if c.unblock_score == top_score]

    return min(remaining, key=lambda c: c.sequence_index)


def derive_reason_code(candidate: CandidateAction, cadence_aligned: bool) -> ActionReasonCode:
    if candidate.category == ActionCategory.BLOCKER:
        return ActionReasonCode.BLOCKER
    if candidate.category == ActionCategory.REQUIRED:
        return ActionReasonCode.REQUIRED
    if cadence_aligned:
        return ActionReasonCode.CADENCE_ALIGNED
    return ActionReasonCode.OPS


def build_explanation(reason_code: ActionReasonCode, cadence_day: int) -> str:
    return EXPLANATIONS[reason_code].format(day=cadence_day)


class _TemplateValues(dict):
    """format_map source that leaves unknown placeholders untouched."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_cta(template: str, values: Mapping[str, str] | None = None) -> str:
    return template.format_map(_TemplateValues(values or {}))


def resolve_tie_break(
    candidates: Sequence[CandidateAction],
    cadence_day: int,
    target_labels: Mapping[str, str] | None = None,
    early_last_day: int = EARLY_CADENCE_LAST_DAY,
) -> ActionableRecommendation:
    """Pick the winner and render it as an ActionableRecommendation.

    Args:
        candidates: Non-empty output of the cadence stage
        cadence_day: Current global cadence day
        target_labels: Display names by target id, used to fill CTA placeholders
        early_last_day: Last early cadence day (see is_cadence_aligned)
    """
    winner = select_winner(candidates)
    aligned = is_cadence_aligned(winner, cadence_day, early_last_day)
    reason_code = derive_reason_code(winner, aligned)

    cta_values: dict[str, str] = {}
    if winner.target_id is not None:
        cta_values["contact_name"] = (target_labels or {}).get(winner.target_id) or UNNAMED_CONTACT

    return ActionableRecommendation(
        action_type=winner.action_type,
        target_id=winner.target_id,
        reason_code=reason_code,
        cta=render_cta(get_action_metadata(winner.action_type).cta_template, cta_values),
        context=ActionableContext(
            category=winner.category,
            priority_band=winner.priority_band,
            unblock_score=winner.unblock_score,
            cadence_aligned=aligned,
            explanation=build_explanation(reason_code, cadence_day),
        ),
    )


# ============================================================================
# Supportive guidance
# ============================================================================


def build_supportive_guidance(
    user: UserProfile | None,
    plan: DailyPlan | None,
) -> SupportiveGuidance:
    """Non-actionable message for when no candidate is left.

    A missing user or plan degrades to SYSTEM_LIMIT rather than an error.
    """
    if user is None:
        return SupportiveGuidance(
            reason_code=GuidanceReasonCode.SYSTEM_LIMIT,
            message=GUIDANCE_USER_NOT_FOUND,
            context=GuidanceContext(
                user_state="unknown",
                last_action_completed=None,
                blocking_reason="User not found",
            ),
        )

    user_state = user.onboarding_status.value if user.onboarding_status else "unknown"

    if plan is None:
        return SupportiveGuidance(
            reason_code=GuidanceReasonCode.SYSTEM_LIMIT,
            message=GUIDANCE_PLAN_UNAVAILABLE,
            context=GuidanceContext(
                user_state=user_state,
                last_action_completed=None,
                blocking_reason="Daily plan unavailable",
            ),
        )

    blocking_reason = None
    if user.onboarding_status == OnboardingStatus.PENDING_ACTIVATION:
        reason_code = GuidanceReasonCode.WAITING_ON_APPROVAL
        message = GUIDANCE_WAITING_ON_APPROVAL
        blocking_reason = "Activation pending admin approval"
    elif user.is_onboarded:
        reason_code = GuidanceReasonCode.NO_ACTIONS_AVAILABLE
        message = GUIDANCE_ALL_CAUGHT_UP
    else:
        reason_code = GuidanceReasonCode.NO_ACTIONS_AVAILABLE
        message = GUIDANCE_GREAT_PROGRESS

    return SupportiveGuidance(
        reason_code=reason_code,
        message=message,
        context=GuidanceContext(
            user_state=user_state,
            last_action_completed=plan.last_completed_action,
            blocking_reason=blocking_reason,
        ),
    )


# ============================================================================
# Main entry point
# ============================================================================


def _load_daily_plan(user_id: str) -> DailyPlan | None:
    try:
        return get_daily_plan(user_id)
    except DailyPlanUnavailableError as e:
        logger.warning(f"{e}; returning supportive guidance", extra={"user_id": user_id})
        return None


async def record_recommendation(
    user_id: str,
    recommendation: BNARecommendation,
    context: str | None,
) -> None:
    """Append the audit row. Failures are logged and never reach the caller."""
    try:
        await asyncio.to_thread(insert_recommendation, user_id, recommendation, context)
    except Exception as e:
        logger.warning(f"Recommendation audit write failed (non-fatal): {e}", extra={"user_id": user_id})


async def resolve_best_next_action(
    user_id: UUID | str,
    context: str | None = None,
    persist: bool | None = None,
) -> BNARecommendation:
    """Resolve the single best next action for a user.

    Args:
        user_id: User UUID
        context: Opaque UI origin (e.g. "dashboard"); recorded for audit only
        persist: Override BNA_PERSIST_RECOMMENDATIONS for this call; the HTTP
            layer passes False and schedules record_recommendation itself

    Returns:
        ActionableRecommendation or SupportiveGuidance

    Raises:
        CadenceUnavailableError: If candidates exist but the cadence day cannot be read
        ActionConfigError: If the static tables are inconsistent
        Exception: Contact or user directory failures propagate unchanged
    """
    settings = get_settings()
    user_id = str(user_id)
    early_last_day = settings.BNA_EARLY_CADENCE_LAST_DAY

    # Independent reads; the plan must land before stage 2
    plan, user, contacts = await asyncio.gather(
        asyncio.to_thread(_load_daily_plan, user_id),
        asyncio.to_thread(get_user_profile, user_id),
        asyncio.to_thread(list_follow_up_contacts, user_id, settings.BNA_FOLLOW_UP_CANDIDATE_LIMIT),
    )

    pool: tuple[CandidateAction, ...] = ()
    eligible: tuple[CandidateAction, ...] = ()
    cadence_day: int | None = None

    if plan is not None:
        pool = build_candidate_pool(plan, contacts, settings.BNA_FOLLOW_UP_CANDIDATE_LIMIT)
        eligible = apply_hard_constraints(pool, plan, user)

    if not eligible:
        recommendation: BNARecommendation = build_supportive_guidance(user, plan)
    else:
        cadence_day = await asyncio.to_thread(get_cadence_day)
        aligned = apply_cadence_alignment(eligible, cadence_day, early_last_day)
        labels = {c.id: c.name for c in contacts if c.name}
        recommendation = resolve_tie_break(aligned, cadence_day, labels, early_last_day)

    log_with_context(
        logger,
        logging.INFO,
        "Resolved best next action",
        user_id=user_id,
        kind=recommendation.kind,
        action_type=(
            recommendation.action_type.value
            if isinstance(recommendation, ActionableRecommendation)
            else None
        ),
        reason_code=recommendation.reason_code.value,
        pool=len(pool),
        eligible=len(eligible),
        cadence_day=cadence_day,
        ui_context=context,
    )

    if settings.BNA_PERSIST_RECOMMENDATIONS if persist is None else persist:
        await record_recommendation(user_id, recommendation, context)

    return recommendation
