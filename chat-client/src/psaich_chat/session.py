"""Chat session flow: quota gate, persona call and history persistence."""

import logging
from dataclasses import dataclass, field
from enum import StrEnum

from psaich_shared import FREE_MESSAGES_PER_MONTH, UPGRADED_MESSAGES, Language, SubscriptionPlan

from .assistant import APOLOGY, Assistant
from .cache import LocalCache
from .firebase_client import FirestoreClient

logger = logging.getLogger(__name__)

APOLOGIES = {
    Language.PT_BR: (
        "Desculpe, estou tendo problemas para processar sua mensagem no momento. "
        "Podemos tentar novamente?"
    ),
    Language.EN_US: APOLOGY,
}


class SendStatus(StrEnum):
    SENT = "sent"
    FAILED = "failed"
    UPGRADE_REQUIRED = "upgrade_required"
    LOGIN_REQUIRED = "login_required"
    IGNORED = "ignored"


@dataclass(frozen=True)
class SendResult:
    status: SendStatus
    remaining: int
    reply: str | None = None


@dataclass(frozen=True)
class Turn:
    sender: str  # "user" or "ai"
    content: str


@dataclass
class SessionState:
    """Mutable state for one chat session."""

    message_count: int = 0
    is_loading: bool = False
    turns: list[Turn] = field(default_factory=list)


class ChatSession:
    """Runs chat exchanges for a signed-in or signed-out user."""

    def __init__(
        self,
        assistant: Assistant,
        cache: LocalCache,
        client: FirestoreClient | None = None,
        language: Language = Language.PT_BR,
    ):
        self._assistant = assistant
        self._cache = cache
        self._client = client
        self.language = language
        self.state = SessionState()

    @property
    def logged_in(self) -> bool:
        return self._client is not None

    @property
    def is_frozen(self) -> bool:
        return self.state.message_count <= 0

    def sync_message_count(self) -> int:
        """Load the current message count from Firestore or the local cache."""
        if self._client is not None:
            self.state.message_count = self._client.get_free_messages_count()
        else:
            self.state.message_count = self._cache.load_message_count()
        return self.state.message_count

    def send(self, text: str) -> SendResult:
        """Send one message to the persona, spending one free message."""
        message = text.strip()
        if not message or self.state.is_loading:
            return SendResult(SendStatus.IGNORED, self.state.message_count)

        if self.is_frozen and not self._refresh_frozen_count():
            return self._limit_reached()

        remaining = self._consume_message()
        if remaining is None:
            self.state.message_count = 0
            return self._limit_reached()

        self.state.message_count = remaining
        if remaining <= 0:
            return self._limit_reached()

        self.state.turns.append(Turn("user", message))
        self.state.is_loading = True
        try:
            reply = self._assistant.chat(message)
            if not reply.success:
                raise RuntimeError(reply.message)

            self.state.turns.append(Turn("ai", reply.message))
            if self._client is not None:
                self._client.save_chat_message(message, reply.message)
            return SendResult(SendStatus.SENT, remaining, reply.message)
        except Exception:
            logger.exception("Error in chat")
            apology = APOLOGIES[self.language]
            self.state.turns.append(Turn("ai", apology))
            return SendResult(SendStatus.FAILED, remaining, apology)
        finally:
            self.state.is_loading = False

    def _consume_message(self) -> int | None:
        """Spend one message. Returns the remaining count, or None if none left."""
        if self._client is None:
            remaining = self.state.message_count - 1
            self._cache.save_message_count(remaining)
            return remaining

        try:
            return self._client.consume_free_message()
        except Exception:
            logger.exception("Error updating free messages count")
            return self.state.message_count - 1

    def _refresh_frozen_count(self) -> bool:
        """Re-read a signed-in count, picking up a monthly reset. True if unfrozen."""
        if self._client is None:
            return False
        try:
            return self.sync_message_count() > 0
        except Exception:
            logger.exception("Error refreshing free messages count")
            return False

    def _limit_reached(self) -> SendResult:
        status = SendStatus.UPGRADE_REQUIRED if self.logged_in else SendStatus.LOGIN_REQUIRED
        logger.info("Message limit reached (%s)", status)
        return SendResult(status, self.state.message_count)

    def upgrade(self) -> None:
        """Grant the upgraded message allowance."""
        logger.info("User upgraded")
        self.state.message_count = UPGRADED_MESSAGES
        if self._client is not None:
            self._client.update_free_messages(UPGRADED_MESSAGES)
        else:
            self._cache.save_message_count(UPGRADED_MESSAGES)

    def logout(self) -> None:
        """Drop the signed-in user and start a fresh signed-out allowance."""
        self._client = None
        self.state = SessionState(message_count=FREE_MESSAGES_PER_MONTH)
        self._cache.save_message_count(FREE_MESSAGES_PER_MONTH)


def subscribe(plan: SubscriptionPlan) -> None:
    """Record the chosen plan. No payment is taken."""
    logger.info("Subscribing to %s plan", plan)
