"""
knowledge_base/conversation_store.py
In-memory conversation and message store.

Every public method takes the store lock for its whole duration, so each
call is atomic with respect to the others.  Messages are append-only.
"""
import threading
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Optional

from monitoring import get_logger

log = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Conversation:
    id: str
    title: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id":        self.id,
            "title":     self.title,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class Message:
    id: str
    conversation_id: str
    role: str
    content: str
    created_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id":             self.id,
            "conversationId": self.conversation_id,
            "role":           self.role,
            "content":        self.content,
            "metadata":       self.metadata or None,
            "createdAt":      self.created_at.isoformat(),
        }


class ConversationStore:

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._conversations: dict[str, Conversation] = {}
        self._messages: dict[str, list[Message]] = {}

    # ── Conversations ─────────────────────────────────────────────────────────

    def create_conversation(self, title: str) -> Conversation:
        now = _now()
        conversation = Conversation(id=str(uuid.uuid4()), title=title, created_at=now, updated_at=now)
        with self._lock:
            self._conversations[conversation.id] = conversation
        log.info("Conversation created", conversation_id=conversation.id)
        return conversation

    def list_conversations(self) -> list[Conversation]:
        with self._lock:
            conversations = list(self._conversations.values())
        return sorted(conversations, key=lambda c: c.updated_at, reverse=True)

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        with self._lock:
            return self._conversations.get(conversation_id)

    def delete_conversation(self, conversation_id: str) -> bool:
        with self._lock:
            self._messages.pop(conversation_id, None)
            deleted = self._conversations.pop(conversation_id, None) is not None
        if deleted:
            log.info("Conversation deleted", conversation_id=conversation_id)
        return deleted

    # ── Messages ──────────────────────────────────────────────────────────────

    def get_messages_by_conversation(self, conversation_id: str) -> list[Message]:
        with self._lock:
            return list(self._messages.get(conversation_id, []))

    def create_message(
        self,
        conversation_id: str,
        role: str,
        content: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Message:
        """Append a message. Raises KeyError if the conversation does not exist."""
        message = Message(
            id=str(uuid.uuid4()),
            conversation_id=conversation_id,
            role=role,
            content=content,
            created_at=_now(),
            metadata=metadata or {},
        )
        with self._lock:
            conversation = self._conversations.get(conversation_id)
            if conversation is None:
                raise KeyError(conversation_id)
            self._messages.setdefault(conversation_id, []).append(message)
            self._conversations[conversation_id] = replace(conversation, updated_at=message.created_at)
        return message
