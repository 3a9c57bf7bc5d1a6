# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from enum import StrEnum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Set

from dacite import from_dict, Config

from shared.constants import DEFAULT_ROOM_NAME, DEFAULT_TASK_TITLE
from shared.json_utils import convert_keys


class Category(StrEnum):
    CHAT = "chat"
    EXPENSE = "expense"
    TASK = "task"
    BROADCAST = "broadcast"
    ANNOUNCEMENT = "announcement"


class Action(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    REMINDER = "reminder"


class EventKind(StrEnum):
    CHAT_MESSAGE_CREATED = "CHAT_MESSAGE_CREATED"
    EXPENSE_CREATED = "EXPENSE_CREATED"
    EXPENSE_UPDATED = "EXPENSE_UPDATED"
    EXPENSE_DELETED = "EXPENSE_DELETED"
    TASK_CREATED = "TASK_CREATED"
    TASK_UPDATED = "TASK_UPDATED"
    TASK_DELETED = "TASK_DELETED"
    DAILY_REMINDER_TICK = "DAILY_REMINDER_TICK"


# (category, action) for every record-level event kind.
EVENT_ROUTES: Dict[EventKind, tuple[Category, Action]] = {
    EventKind.CHAT_MESSAGE_CREATED: (Category.CHAT, Action.CREATED),
    EventKind.EXPENSE_CREATED: (Category.EXPENSE, Action.CREATED),
    EventKind.EXPENSE_UPDATED: (Category.EXPENSE, Action.UPDATED),
    EventKind.EXPENSE_DELETED: (Category.EXPENSE, Action.DELETED),
    EventKind.TASK_CREATED: (Category.TASK, Action.CREATED),
    EventKind.TASK_UPDATED: (Category.TASK, Action.UPDATED),
    EventKind.TASK_DELETED: (Category.TASK, Action.DELETED),
}


@dataclass
class Room:
    """A room document, as far as notifications are concerned."""

    id: str
    name: str = DEFAULT_ROOM_NAME
    members: Set[str] = field(default_factory=set)

    @classmethod
    def from_document(cls, room_id: str, doc: Optional[dict]) -> "Room":
        doc = doc or {}
        members = doc.get("members") or []
        return cls(
            id=room_id,
            name=doc.get("name") or DEFAULT_ROOM_NAME,
            members={str(m) for m in members if m},
        )


@dataclass
class UserPreferences:
    """
    Notification settings stored on a user document.

    Missing flags mean "enabled": users are opted in until they opt out.
    """

    notifications_enabled: bool = True
    chat_notifications_enabled: bool = True
    expense_payment_alerts_enabled: bool = True
    task_reminders_enabled: bool = True

    @classmethod
    def from_document(cls, doc: Optional[dict]) -> "UserPreferences":
        known = {
            key: value
            for key, value in convert_keys(doc or {}, "camel_to_snake").items()
            if key in cls.__dataclass_fields__ and value is not None
        }
        return from_dict(
            data_class=cls,
            data=known,
            config=Config(check_types=False),
        )


@dataclass
class TaskInstance:
    """A scheduled occurrence of a room task."""

    id: str
    title: str = DEFAULT_TASK_TITLE
    assigned_to: Optional[str] = None
    scheduled_date: Optional[datetime] = None

    @classmethod
    def from_document(cls, instance_id: str, doc: Optional[dict]) -> "TaskInstance":
        doc = doc or {}
        return cls(
            id=instance_id,
            title=doc.get("taskTitle") or doc.get("title") or DEFAULT_TASK_TITLE,
            assigned_to=doc.get("assignedTo") or None,
            scheduled_date=doc.get("scheduledDate"),
        )


@dataclass
class DomainEvent:
    """A change to a room record, or the daily reminder tick."""

    kind: EventKind
    room_id: Optional[str] = None
    record_id: Optional[str] = None
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None

    @property
    def fields(self) -> Dict[str, Any]:
        """Post-change state, or the last snapshot for deletions."""
        if self.kind in (EventKind.EXPENSE_DELETED, EventKind.TASK_DELETED):
            return self.before or {}
        return self.after or {}


@dataclass
class NotificationPayload:
    """A composed push notification."""

    title: str
    body: str
    category: Category
    data: Dict[str, str] = field(default_factory=dict)
    image_url: Optional[str] = None
