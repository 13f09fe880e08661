import copy
from datetime import datetime, timezone
from threading import Lock
from typing import List, Optional
from uuid import uuid4

from servicehub import data
from servicehub.models import ChatMessage


class ChatStore:
    def __init__(self):
        self._lock = Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._messages: List[ChatMessage] = [
                ChatMessage.model_validate(row) for row in copy.deepcopy(data.chat_messages)
            ]

    def thread(self, user_id: str, counterpart_id: str) -> List[ChatMessage]:
        with self._lock:
            rows = [
                m
                for m in self._messages
                if (m.sender_id == user_id and m.receiver_id == counterpart_id)
                or (m.sender_id == counterpart_id and m.receiver_id == user_id)
            ]
        rows.sort(key=lambda m: m.created_at)
        return rows

    def last_message(self, user_id: str, counterpart_id: str) -> Optional[ChatMessage]:
        rows = self.thread(user_id, counterpart_id)
        return rows[-1] if rows else None

    def unread_count(self, user_id: str, counterpart_id: str) -> int:
        with self._lock:
            return sum(
                1
                for m in self._messages
                if m.sender_id == counterpart_id and m.receiver_id == user_id and not m.is_read
            )

    def mark_thread_read(self, user_id: str, counterpart_id: str) -> int:
        """Mark messages sent to ``user_id`` by ``counterpart_id`` as read."""
        changed = 0
        with self._lock:
            for idx, row in enumerate(self._messages):
                if row.sender_id == counterpart_id and row.receiver_id == user_id and not row.is_read:
                    self._messages[idx] = row.model_copy(update={"is_read": True})
                    changed += 1
        return changed

    def send(self, sender_id: str, receiver_id: str, message: str) -> ChatMessage:
        text = message.strip()
        if not text:
            raise ValueError("Message cannot be empty")
        record = ChatMessage(
            id=f"msg_{uuid4().hex[:10]}",
            sender_id=sender_id,
            receiver_id=receiver_id,
            message=text,
            is_read=False,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._messages.append(record)
        return record


chat_store = ChatStore()
