"""Tests for the persona call."""

from unittest.mock import MagicMock

from psaich_chat.assistant import APOLOGY, SYSTEM_PROMPT, Assistant


def _completion(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    return response


def test_sends_persona_prompt_and_user_message() -> None:
    client = MagicMock()
    client.chat.completions.create.return_value = _completion("How does that make you feel?")

    reply = Assistant(client, model="gpt-4").chat("I had a rough day")

    assert reply.success
    assert reply.message == "How does that make you feel?"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4"
    assert kwargs["messages"] == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "I had a rough day"},
    ]


def test_api_error_becomes_apology() -> None:
    client = MagicMock()
    client.chat.completions.create.side_effect = RuntimeError("rate limited")

    reply = Assistant(client).chat("hello")

    assert not reply.success
    assert reply.message == APOLOGY


def test_empty_completion_is_a_failure() -> None:
    client = MagicMock()
    client.chat.completions.create.return_value = _completion(None)

    assert not Assistant(client).chat("hello").success
