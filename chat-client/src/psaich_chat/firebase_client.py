"""Firebase/Firestore client for the chat client."""

import logging
from datetime import UTC, date, datetime
from typing import Any

from google.cloud.firestore import (  # type: ignore[import-untyped]
    SERVER_TIMESTAMP,
    Client,
    Query,
    Transaction,
    transactional,
)

from psaich_shared import FREE_MESSAGES_PER_MONTH, ChatMessage, Identity, ProfileUpdate, UserRecord
from psaich_shared.firestore import fields_to_firestore, firestore_to_dict, model_to_firestore

from .history import collect_chat_dates, day_bounds
from .quota import plan_consumption, should_reset_free_messages
from .streak import next_streak

logger = logging.getLogger(__name__)


class FirestoreClient:
    """Handles all Firestore operations for one signed-in user."""

    def __init__(self, db: Client, user_id: str):
        self._db = db
        self._user_id = user_id

    @property
    def user_id(self) -> str:
        return self._user_id

    def _user_ref(self):
        return self._db.collection("users").document(self._user_id)

    def _chat_ref(self):
        return self._user_ref().collection("chat")

    def _get_user_doc(self) -> dict[str, Any]:
        doc = self._user_ref().get()
        if not doc.exists:
            raise ValueError(f"User {self._user_id} not found")
        return doc.to_dict() or {}

    def get_user_data(self) -> dict[str, Any] | None:
        """Get the raw user document, or None if it doesn't exist."""
        doc = self._user_ref().get()
        if not doc.exists:
            return None
        return doc.to_dict()

    def get_user(self) -> UserRecord:
        """Get the current user document."""
        return UserRecord.model_validate(firestore_to_dict(self._get_user_doc()))

    def save_user_data(
        self,
        identity: Identity,
        additional: dict[str, Any] | None = None,
    ) -> UserRecord:
        """Create or refresh the user document on login.

        Existing documents keep their stored fields. New documents get a
        fresh monthly quota.
        """
        additional = fields_to_firestore(additional or {})
        now = datetime.now(UTC)
        login_fields: dict[str, Any] = {
            "email": identity.email or "",
            "photoURL": identity.photo_url or "",
            "lastLogin": now,
        }

        existing = self.get_user_data()
        if existing is not None:
            # Merge leaves the stored quota alone; only login fields are written.
            payload = {**additional, **login_fields}
            self._user_ref().set(payload, merge=True)
            return UserRecord.model_validate(firestore_to_dict({**existing, **payload}))

        user_data = {
            **login_fields,
            "country": "",
            **additional,
            "phoneNumber": identity.phone_number or additional.get("phoneNumber", ""),
            "firstName": additional.get("firstName", ""),
            "lastName": additional.get("lastName", ""),
            "freeMessages": FREE_MESSAGES_PER_MONTH,
            "lastFreeMessagesReset": now,
        }
        if identity.display_name and "displayName" not in user_data:
            user_data["displayName"] = identity.display_name
        logger.info("Creating user document for %s", self._user_id)

        self._user_ref().set(user_data, merge=True)
        return UserRecord.model_validate(firestore_to_dict(user_data))

    def update_user_data(self, fields: dict[str, Any]) -> None:
        """Update selected fields of the user document (snake_case keys)."""
        self._user_ref().update(fields_to_firestore(fields))

    def update_profile(self, profile: ProfileUpdate) -> None:
        """Merge the set fields of a settings form into the user document."""
        data = model_to_firestore(profile, partial=True)
        if not data:
            return
        self._user_ref().set(data, merge=True)

    def update_last_login(self) -> None:
        self._user_ref().update({"lastLogin": SERVER_TIMESTAMP})

    def get_free_messages_count(self) -> int:
        """Get the remaining free messages, applying the monthly reset.

        A reset rewrites the stored count before returning it.
        """
        data = self._get_user_doc()
        now = datetime.now(UTC)
        last_reset = data.get("lastFreeMessagesReset") or now

        if should_reset_free_messages(last_reset, now):
            self._reset_free_messages()
            return FREE_MESSAGES_PER_MONTH

        return int(data.get("freeMessages", 0))

    def _reset_free_messages(self) -> None:
        logger.info("New month detected, resetting free messages for %s", self._user_id)
        self._user_ref().update(
            {
                "freeMessages": FREE_MESSAGES_PER_MONTH,
                "lastFreeMessagesReset": SERVER_TIMESTAMP,
            }
        )

    def update_free_messages(self, count: int) -> None:
        """Overwrite the stored free message count."""
        self._user_ref().update({"freeMessages": count})

    def consume_free_message(self) -> int | None:
        """Atomically spend one free message.

        Returns the remaining count, or None if nothing was left to spend.
        """
        user_ref = self._user_ref()
        transaction = self._db.transaction()

        @transactional
        def consume_in_transaction(transaction: Transaction) -> int | None:
            user_doc = user_ref.get(transaction=transaction)
            if not user_doc.exists:
                raise ValueError(f"User {self._user_id} not found")

            consumption = plan_consumption(user_doc.to_dict() or {}, datetime.now(UTC))
            if not consumption.allowed:
                return None

            updates: dict[str, Any] = {"freeMessages": consumption.remaining}
            if consumption.reset:
                updates["lastFreeMessagesReset"] = SERVER_TIMESTAMP
            transaction.update(user_ref, updates)
            return consumption.remaining

        return consume_in_transaction(transaction)

    def save_chat_message(self, user_message: str, ai_response: str) -> str:
        """Append a chat exchange to the user's history.

        Returns the new message ID.
        """
        _, doc_ref = self._chat_ref().add(
            {
                "userMessage": user_message,
                "aiResponse": ai_response,
                "timestamp": SERVER_TIMESTAMP,
            }
        )
        return doc_ref.id

    def get_messages_for_day(self, day: date) -> list[ChatMessage]:
        """Get the exchanges of one local calendar day, oldest first."""
        start, end = day_bounds(day)
        query = (
            self._chat_ref()
            .where("timestamp", ">=", start)
            .where("timestamp", "<=", end)
            .order_by("timestamp", direction=Query.ASCENDING)
        )
        return [
            ChatMessage.model_validate(firestore_to_dict(doc.to_dict()))
            for doc in query.stream()
        ]

    def get_chat_dates(self, today: date | None = None) -> list[str]:
        """Get the past days that have chat history, newest first."""
        query = self._chat_ref().order_by("timestamp", direction=Query.DESCENDING)
        timestamps = ((doc.to_dict() or {}).get("timestamp") for doc in query.stream())
        return collect_chat_dates(timestamps, today or date.today())

    def update_streak(self) -> int:
        """Advance the consecutive-day streak for a visit now."""
        data = self._get_user_doc()
        now = datetime.now(UTC)
        current = data.get("streak")

        new_streak = next_streak(current, data.get("lastLogin"), now)
        if new_streak is None:
            return current or 0

        self._user_ref().update({"streak": new_streak, "lastLogin": now})
        logger.debug("Streak for %s is now %d", self._user_id, new_streak)
        return new_streak

    def get_streak(self) -> int:
        return int(self._get_user_doc().get("streak") or 0)
