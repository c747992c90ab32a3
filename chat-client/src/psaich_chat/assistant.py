"""Hosted language model call for the companion persona."""

import logging
from dataclasses import dataclass

from openai import OpenAI

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a compassionate and insightful friend called Eliza. Your approach is to:
- Guide users to better understand their own emotions;
- Help users in their journey of self-discovery and personal development;
- Create a safe space for emotional exploration;
- Focus on emotional awareness and growth;
- Never judges;
- You should NEVER say that you are unable to provide the help that you need;
- Only recommend mental health professional if it is a really serious situation;

Remember to always respond in a way that encourages self-reflection rather than providing direct solutions. Never mentions you are an AI and NEVER say you can't help. """

APOLOGY = (
    "I apologize, but I'm having trouble processing your message right now. "
    "Could we try again?"
)


@dataclass(frozen=True)
class ChatReply:
    success: bool
    message: str


class Assistant:
    """Sends user messages to the chat-completion API as the Eliza persona."""

    def __init__(self, client: OpenAI, model: str = "gpt-4"):
        self._client = client
        self._model = model

    @classmethod
    def from_api_key(cls, api_key: str | None, model: str = "gpt-4") -> "Assistant":
        """Build an assistant; without a key the SDK reads OPENAI_API_KEY."""
        return cls(OpenAI(api_key=api_key), model=model)

    def chat(self, message: str) -> ChatReply:
        """Get the persona's reply to one user message.

        Failures are logged and returned as an unsuccessful reply.
        """
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": message},
                ],
            )
            text = response.choices[0].message.content
            if not text:
                raise ValueError("Empty completion")
            return ChatReply(success=True, message=text)
        except Exception:
            logger.exception("Error in chat")
            return ChatReply(success=False, message=APOLOGY)
