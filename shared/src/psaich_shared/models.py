"""Firestore data models for the psaich companion chat.

These models define the schema for the user and chat collections.
Every client (web, CLI) must conform to this schema.
"""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

FREE_MESSAGES_PER_MONTH = 15
UPGRADED_MESSAGES = 100


class Language(StrEnum):
    PT_BR = "pt-BR"
    EN_US = "en-US"


class PsychologySchool(StrEnum):
    COGNITIVE = "cognitive"
    BEHAVIORAL = "behavioral"
    PSYCHOANALYTIC = "psychoanalytic"
    HUMANISTIC = "humanistic"
    BIOLOGICAL = "biological"


PSYCHOLOGY_SCHOOL_DESCRIPTIONS: dict[PsychologySchool, str] = {
    PsychologySchool.COGNITIVE: (
        "Focuses on mental processes such as memory, thinking and problem solving."
    ),
    PsychologySchool.BEHAVIORAL: (
        "Emphasizes the role of environmental factors in shaping behavior."
    ),
    PsychologySchool.PSYCHOANALYTIC: (
        "Explores unconscious thoughts and childhood experiences to explain behavior."
    ),
    PsychologySchool.HUMANISTIC: (
        "Emphasizes personal growth, self-actualization and the present moment."
    ),
    PsychologySchool.BIOLOGICAL: (
        "Examines how the brain and neurotransmitters influence our behavior."
    ),
}


class SubscriptionPlan(StrEnum):
    MONTHLY = "monthly"
    ANNUALLY = "annually"


class Identity(BaseModel):
    """Identity fields supplied by the auth provider."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None


class UserRecord(BaseModel):
    """Firestore: users/{userId}

    Identity fields are mirrored from Firebase Auth on every login.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: str = ""
    display_name: str | None = None
    photo_url: str = ""
    first_name: str = ""
    last_name: str = ""
    phone_number: str = ""
    address: str | None = None
    country: str = ""
    newsletter: bool | None = None
    psychology_school: PsychologySchool | None = None
    free_messages: int = FREE_MESSAGES_PER_MONTH
    last_free_messages_reset: datetime | None = None
    streak: Annotated[int, Field(ge=0)] | None = None
    last_login: datetime | None = None

    @field_validator("psychology_school", mode="before")
    @classmethod
    def _blank_school(cls, value: Any) -> Any:
        # The web settings form stores "" when no school is picked.
        return None if value == "" else value


class ProfileUpdate(BaseModel):
    """Fields editable from the settings screen.

    Unset fields are left untouched on save.
    """

    display_name: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None
    address: str | None = None
    country: str | None = None
    newsletter: bool | None = None
    psychology_school: PsychologySchool | None = None


class ChatMessage(BaseModel):
    """Firestore: users/{userId}/chat/{messageId}

    Append-only. ``timestamp`` is assigned by the server on write.
    """

    user_message: str
    ai_response: str
    timestamp: datetime | None = None
