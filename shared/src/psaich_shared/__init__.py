from .models import (
    FREE_MESSAGES_PER_MONTH,
    PSYCHOLOGY_SCHOOL_DESCRIPTIONS,
    UPGRADED_MESSAGES,
    ChatMessage,
    Identity,
    Language,
    ProfileUpdate,
    PsychologySchool,
    SubscriptionPlan,
    UserRecord,
)

__all__ = [
    "FREE_MESSAGES_PER_MONTH",
    "PSYCHOLOGY_SCHOOL_DESCRIPTIONS",
    "UPGRADED_MESSAGES",
    "ChatMessage",
    "Identity",
    "Language",
    "ProfileUpdate",
    "PsychologySchool",
    "SubscriptionPlan",
    "UserRecord",
]
