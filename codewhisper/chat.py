"""
In-memory chat transcript for the Try-It window.

Messages live only as long as the window; nothing is written to disk unless
the user explicitly exports the transcript.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime

#: Valid transcript roles.  Errors are shown as assistant messages.
VALID_ROLES: tuple[str, ...] = ("user", "assistant")

GREETING = "Hello! I'm CodeWhisper. What would you like help with today?"
CLEARED = "Chat cleared. How can I help you with your code today?"


@dataclass
class ChatMessage:
    role: str
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
    is_error: bool = False

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
            "is_error": self.is_error,
        }


class ChatTranscript:
    """Ordered list of chat messages, seeded with a greeting."""

    def __init__(self, greeting: str = GREETING) -> None:
        self._messages: list[ChatMessage] = [ChatMessage("assistant", greeting)]

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def add(self, role: str, content: str, *, is_error: bool = False) -> ChatMessage:
        if role not in VALID_ROLES:
            raise ValueError(f"Invalid role {role!r}; expected one of {VALID_ROLES}")
        msg = ChatMessage(role, content, is_error=is_error)
        self._messages.append(msg)
        return msg

    def add_user(self, content: str) -> ChatMessage:
        return self.add("user", content)

    def add_assistant(self, content: str) -> ChatMessage:
        return self.add("assistant", content)

    def add_error(self, error: Exception | str) -> ChatMessage:
        """Record a failure in context so it is never silently dropped."""
        text = error.message if hasattr(error, "message") else str(error)
        return self.add("assistant", f"Error: {text}", is_error=True)

    def clear(self) -> None:
        self._messages = [ChatMessage("assistant", CLEARED)]

    def to_text(self) -> str:
        lines = []
        for msg in self._messages:
            who = "You" if msg.role == "user" else "CodeWhisper"
            lines.append(f"[{msg.timestamp:%H:%M:%S}] {who}:\n{msg.content}")
        return "\n\n".join(lines) + "\n"

    def to_json(self) -> str:
        return json.dumps([m.to_dict() for m in self._messages],
                          ensure_ascii=False, indent=2)
