"""Static action tables for the BNA resolver.

Loaded once at import and never mutated. ``validate_action_tables`` runs at
import so a new ActionType or ActionKey without its table entry fails the
process at startup instead of mid-request.
"""

from types import MappingProxyType
from typing import Mapping

from activation_engine.core.errors import ActionConfigError
from activation_engine.core.schemas_bna import (
    ActionCategory,
    ActionKey,
    ActionMetadata,
    ActionType,
    PriorityBand,
)

# ============================================================================
# Metadata
# ============================================================================

ACTION_METADATA: Mapping[ActionType, ActionMetadata] = MappingProxyType({
    # Document uploads
    ActionType.UPLOAD_LICENSE: ActionMetadata(
        category=ActionCategory.BLOCKER,
        priority_band=PriorityBand.HIGH,
        unblock_score=2,  # E&O + contracts
        cta_template="Upload your insurance license",
    ),
    ActionType.UPLOAD_EO: ActionMetadata(
        category=ActionCategory.BLOCKER,
        priority_band=PriorityBand.HIGH,
        unblock_score=3,  # activation + system access
        cta_template="Upload your E&O insurance",
    ),
    ActionType.UPLOAD_CONTRACT: ActionMetadata(
        category=ActionCategory.BLOCKER,
        priority_band=PriorityBand.HIGH,
        unblock_score=1,
        cta_template="Upload your signed contract",
    ),
    # Onboarding tasks
    ActionType.COMPLETE_LICENSED_INTAKE: ActionMetadata(
        category=ActionCategory.REQUIRED,
        priority_band=PriorityBand.HIGH,
        unblock_score=2,
        cta_template="Complete your licensed agent intake form",
    ),
    ActionType.SCHEDULE_EXAM: ActionMetadata(
        category=ActionCategory.REQUIRED,
        priority_band=PriorityBand.MED,
        unblock_score=1,  # license upload
        cta_template="Schedule your licensing exam",
    ),
    ActionType.COMPLETE_PROFILE: ActionMetadata(
        category=ActionCategory.REQUIRED,
        priority_band=PriorityBand.LOW,
        unblock_score=1,
        cta_template="Complete your profile",
    ),
    # Affiliate tasks
    ActionType.SUBMIT_AFFILIATE_PROFILE: ActionMetadata(
        category=ActionCategory.REQUIRED,
        priority_band=PriorityBand.HIGH,
        unblock_score=1,  # referral link generation
        cta_template="Submit your affiliate profile",
    ),
    ActionType.GENERATE_REFERRAL_LINK: ActionMetadata(
        category=ActionCategory.REQUIRED,
        priority_band=PriorityBand.MED,
        unblock_score=2,  # sharing + tracking
        cta_template="Generate your referral link",
    ),
    ActionType.SHARE_REFERRAL_LINK: ActionMetadata(
        category=ActionCategory.REQUIRED,
        priority_band=PriorityBand.LOW,
        unblock_score=0,
        cta_template="Share your referral link",
    ),
    # Operational
    ActionType.FOLLOW_UP_CONTACT: ActionMetadata(
        category=ActionCategory.OPS,
        priority_band=PriorityBand.MED,
        unblock_score=0,
        cta_template="Follow up with {contact_name}",
    ),
    # System
    ActionType.UNLOCK_ACTIVATION: ActionMetadata(
        category=ActionCategory.REQUIRED,
        priority_band=PriorityBand.HIGH,
        unblock_score=5,  # full platform access
        cta_template="Complete activation to unlock full access",
    ),
})

# The action type that grants full platform access once completed
ACTIVATION_ACTION = ActionType.UNLOCK_ACTIVATION

# The action type generated for each follow-up contact
FOLLOW_UP_ACTION = ActionType.FOLLOW_UP_CONTACT

# ============================================================================
# ActionKey <-> ActionType
# ============================================================================

# None = system milestone with no user-facing recommendation
ACTION_KEY_TO_TYPE: Mapping[ActionKey, ActionType | None] = MappingProxyType({
    ActionKey.ACCOUNT_CREATED: None,
    ActionKey.LICENSED_CHECK: None,
    ActionKey.EXAM_SCHEDULED: ActionType.SCHEDULE_EXAM,
    ActionKey.LICENSE_UPLOADED: ActionType.UPLOAD_LICENSE,
    ActionKey.LICENSED_AGENT_INTAKE: ActionType.COMPLETE_LICENSED_INTAKE,
    ActionKey.EO_UPLOADED: ActionType.UPLOAD_EO,
    ActionKey.ACTIVATION_UNLOCKED: ActionType.UNLOCK_ACTIVATION,
    ActionKey.AFFILIATE_PROFILE_SUBMITTED: ActionType.SUBMIT_AFFILIATE_PROFILE,
    ActionKey.REFERRAL_LINK_GENERATED: ActionType.GENERATE_REFERRAL_LINK,
    ActionKey.FIRST_SHARE: ActionType.SHARE_REFERRAL_LINK,
})

# UPLOAD_CONTRACT, COMPLETE_PROFILE and FOLLOW_UP_CONTACT have no key
ACTION_TYPE_TO_KEY: Mapping[ActionType, ActionKey] = MappingProxyType({
    action_type: key
    for key, action_type in ACTION_KEY_TO_TYPE.items()
    if action_type is not None
})


# ============================================================================
# Lookups
# ============================================================================


def get_action_metadata(action_type: ActionType) -> ActionMetadata:
    """Metadata for an action type. A miss is a configuration bug."""
    try:
        return ACTION_METADATA[action_type]
    except KeyError:
        raise ActionConfigError(f"No metadata configured for action type {action_type!r}") from None


def action_type_for_key(action_key: ActionKey) -> ActionType | None:
    return ACTION_KEY_TO_TYPE.get(action_key)


def action_key_for_type(action_type: ActionType) -> ActionKey | None:
    return ACTION_TYPE_TO_KEY.get(action_type)


def validate_action_tables() -> None:
    """Check the tables cover every enum member and agree with each other.

    Raises:
        ActionConfigError: On the first inconsistency found
    """
    missing_metadata = [t.value for t in ActionType if t not in ACTION_METADATA]
    if missing_metadata:
        raise ActionConfigError(f"Action types without metadata: {missing_metadata}")

    unmapped_keys = [k.value for k in ActionKey if k not in ACTION_KEY_TO_TYPE]
    if unmapped_keys:
        raise ActionConfigError(f"Action keys without a mapping entry: {unmapped_keys}")

    mapped_types = [t for t in ACTION_KEY_TO_TYPE.values() if t is not None]
    if len(mapped_types) != len(set(mapped_types)):
        raise ActionConfigError("Two action keys map to the same action type")


validate_action_tables()
