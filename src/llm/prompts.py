"""
Chat relay prompt templates
"""

from typing import Sequence
from src.config.constants import HISTORY_ASSISTANT_PREFIX, HISTORY_USER_PREFIX, SYSTEM_PROMPT
from src.models.domain import ChatExchange


def format_history(history: Sequence[ChatExchange], max_turns: int = 3) -> str:
    """
    Render the last `max_turns` exchanges as a plain-text transcript.

    Args:
        history: Prior exchanges of the conversation, oldest first
        max_turns: Maximum number of exchanges to include

    Returns:
        Transcript with one "User:" and one "Assistant:" line per exchange
    """
    if max_turns <= 0 or not history:
        return ""

    lines = []
    for exchange in list(history)[-max_turns:]:
        lines.append(f"{HISTORY_USER_PREFIX}: {exchange.user_message}")
        lines.append(f"{HISTORY_ASSISTANT_PREFIX}: {exchange.ai_response}")
    return "\n".join(lines)


def build_chat_prompt(
    message: str,
    history: Sequence[ChatExchange] = (),
    max_turns: int = 3,
) -> str:
    """
    Build the single prompt sent to the LLM.

    Args:
        message: The user's (already validated) question
        history: Prior exchanges of the same conversation, oldest first
        max_turns: Maximum number of prior exchanges to include

    Returns:
        Formatted prompt
    """
    transcript = format_history(history, max_turns=max_turns)

    parts = [SYSTEM_PROMPT, ""]
    if transcript:
        parts.extend(["CONVERSATION HISTORY:", transcript, ""])
    parts.extend([f"QUESTION: {message}", "", "ANSWER:"])

    return "\n".join(parts)
