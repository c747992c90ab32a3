"""Free-message quota rules.

The quota resets to FREE_MESSAGES_PER_MONTH once per calendar month and is
spent one message per chat exchange.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from psaich_shared import FREE_MESSAGES_PER_MONTH, Language


def should_reset_free_messages(last_reset: datetime, now: datetime) -> bool:
    """Check whether ``now`` falls in a later calendar month than ``last_reset``.

    Both values are compared in local time.
    """
    last_local = last_reset.astimezone()
    now_local = now.astimezone()
    return now_local.year != last_local.year or now_local.month != last_local.month


@dataclass(frozen=True)
class Consumption:
    """Outcome of spending one message against a stored user document."""

    allowed: bool
    remaining: int
    reset: bool


def plan_consumption(data: dict[str, Any], now: datetime) -> Consumption:
    """Decide how one message is spent against a raw ``users/{uid}`` document.

    A pending monthly reset is applied before spending. A count already at
    zero is not spent.
    """
    count = int(data.get("freeMessages", 0))
    last_reset = data.get("lastFreeMessagesReset") or now

    reset = should_reset_free_messages(last_reset, now)
    if reset:
        count = FREE_MESSAGES_PER_MONTH

    if count <= 0:
        return Consumption(allowed=False, remaining=0, reset=reset)
    return Consumption(allowed=True, remaining=count - 1, reset=reset)


def quota_status_message(count: int, logged_in: bool, language: Language) -> str:
    """Get the banner text shown under the chat input."""
    if language == Language.PT_BR:
        if logged_in:
            if count > 0:
                return f"{count} mensagens restantes"
            return "Você atingiu o limite de mensagens. Por favor, atualize para continuar."
        if count > 0:
            return f"{count} mensagens gratuitas restantes"
        return (
            "Você atingiu o limite de mensagens gratuitas. "
            "Por favor, faça login para continuar."
        )

    if logged_in:
        if count > 0:
            return f"{count} messages remaining"
        return "You have reached your message limit. Please upgrade to continue."
    if count > 0:
        return f"{count} free messages remaining"
    return "You have reached your free message limit. Please log in to continue."
