import copy
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional
from uuid import uuid4

from servicehub import data
from servicehub.models import NotificationRecord

LIST_LIMIT = 100


class NotificationStore:
    def __init__(self):
        self._lock = Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._notifications: List[NotificationRecord] = [
                NotificationRecord.model_validate(row) for row in copy.deepcopy(data.notifications)
            ]

    def create(
        self,
        user_id: str,
        title: str,
        message: str,
        type: str = "system",
    ) -> NotificationRecord:
        record = NotificationRecord(
            id=f"notif_{uuid4().hex[:10]}",
            user_id=user_id,
            title=title,
            message=message,
            type=type,  # type: ignore[arg-type]
            is_read=False,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._notifications.insert(0, record)
        return record

    def _rows_for(self, user_id: str) -> List[NotificationRecord]:
        with self._lock:
            rows = [n for n in self._notifications if n.user_id == user_id]
        rows.sort(key=lambda n: n.created_at, reverse=True)
        return rows

    def list_for_user(self, user_id: str, unread_only: bool = False) -> List[NotificationRecord]:
        rows = self._rows_for(user_id)
        if unread_only:
            rows = [n for n in rows if not n.is_read]
        return rows[:LIST_LIMIT]

    def summary(self, user_id: str) -> Dict[str, object]:
        rows = self._rows_for(user_id)
        by_type: Dict[str, int] = {}
        for row in rows:
            by_type[row.type] = by_type.get(row.type, 0) + 1
        return {
            "total": len(rows),
            "unread": sum(1 for n in rows if not n.is_read),
            "by_type": by_type,
        }

    def mark_read(self, user_id: str, notification_id: str) -> Optional[NotificationRecord]:
        with self._lock:
            for idx, row in enumerate(self._notifications):
                if row.id == notification_id and row.user_id == user_id:
                    updated = row.model_copy(update={"is_read": True})
                    self._notifications[idx] = updated
                    return updated
        return None

    def mark_all_read(self, user_id: str) -> int:
        changed = 0
        with self._lock:
            for idx, row in enumerate(self._notifications):
                if row.user_id == user_id and not row.is_read:
                    self._notifications[idx] = row.model_copy(update={"is_read": True})
                    changed += 1
        return changed

    def delete(self, user_id: str, notification_id: str) -> bool:
        with self._lock:
            before = len(self._notifications)
            self._notifications = [
                n for n in self._notifications if not (n.id == notification_id and n.user_id == user_id)
            ]
            return len(self._notifications) != before


notification_store = NotificationStore()
