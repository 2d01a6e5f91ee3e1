"""build_messages — assembles the chat-completion message list for one analysis."""
from collections.abc import Sequence
from typing import Any, Optional

from src.constants import (
    FOLLOW_UP_PROMPT,
    PART_IMAGE_URL,
    PART_TEXT,
    ROLE_USER,
    SYSTEM_PROMPT,
)

Message = dict[str, Any]


def text_part(text: str) -> dict[str, Any]:
    return {"type": PART_TEXT, "text": text}


def image_part(image_reference: str) -> dict[str, Any]:
    return {"type": PART_IMAGE_URL, "image_url": {"url": image_reference}}


def build_messages(
    image_reference: str,
    *,
    custom_prompt: Optional[str] = None,
    conversation_history: Optional[Sequence[Message]] = None,
    include_follow_up: bool = True,
    system_prompt: str = SYSTEM_PROMPT,
    follow_up_prompt: str = FOLLOW_UP_PROMPT,
) -> list[Message]:
    """Return [initial user message, *history, follow-up].

    The initial message carries the prompt text and exactly one image part.
    History messages are appended as given. The follow-up question is added
    unless ``include_follow_up`` is False.
    """
    initial = {
        "role": ROLE_USER,
        "content": [
            text_part(custom_prompt or system_prompt),
            image_part(image_reference),
        ],
    }
    follow_up = (
        [{"role": ROLE_USER, "content": [text_part(follow_up_prompt)]}]
        if include_follow_up is not False
        else []
    )
    return [initial, *(conversation_history or ()), *follow_up]
