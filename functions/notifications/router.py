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
"""
Routes domain events through compose -> resolve -> dispatch.

Record events (chat/expense/task create, update, delete) go to the room's
members minus the actor. The daily tick sends each assignee a digest of the
task instances scheduled for the current UTC day.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from firebase_functions import logger

from notifications import composer
from notifications.directory import Directory
from notifications.dispatcher import Dispatcher, DispatchReport
from notifications.resolver import RecipientResolver, allows, load_preferences
from shared.constants import DEFAULT_CURRENCY_SYMBOL, DEFAULT_ROOM_NAME
from shared.firebase_constants import ALL_USERS_TOPIC, room_topic
from shared.types import Action, Category, DomainEvent, EVENT_ROUTES, EventKind

# Legacy documents name the acting user inconsistently; the first non-empty
# field wins.
CREATOR_FIELDS: Dict[Category, Tuple[str, ...]] = {
    Category.CHAT: ("senderId", "uid", "createdBy"),
    Category.EXPENSE: ("createdBy", "uid"),
    Category.TASK: ("createdBy", "uid"),
}
ACTION_ACTOR_FIELDS: Dict[Action, Tuple[str, ...]] = {
    Action.UPDATED: ("updatedBy",),
    Action.DELETED: ("deletedBy",),
}


def extract_actor(kind: EventKind, fields: Dict[str, Any]) -> Optional[str]:
    """Best-effort id of the user who caused `kind`, or None."""
    category, action = EVENT_ROUTES[kind]
    candidates = ACTION_ACTOR_FIELDS.get(action, ()) + CREATOR_FIELDS[category]
    for name in candidates:
        value = fields.get(name)
        if isinstance(value, str) and value:
            return value
    return None


def utc_day_window(now: datetime) -> Tuple[datetime, datetime]:
    """[start, end) of the UTC calendar day containing `now`."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    start = datetime(now.year, now.month, now.day, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class EventRouter:
    def __init__(
        self,
        directory: Directory,
        resolver: RecipientResolver,
        dispatcher: Dispatcher,
        currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    ):
        self.directory = directory
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.currency_symbol = currency_symbol

    def room_name(self, room_id: str) -> str:
        """Display name of the room, or the default label if it can't be read."""
        try:
            room = self.directory.get_room(room_id)
        except Exception as e:
            logger.warn(f"Could not read room {room_id}: {e}")
            return DEFAULT_ROOM_NAME
        if room is None or not room.name:
            return DEFAULT_ROOM_NAME
        return room.name

    def handle(self, event: DomainEvent) -> Optional[DispatchReport]:
        """
        Notifies the room about one record event.

        Errors while resolving or dispatching are logged and swallowed so that
        one event never affects another. Returns None in that case.
        """
        if event.kind == EventKind.DAILY_REMINDER_TICK:
            self.send_daily_reminders()
            return None

        category, _ = EVENT_ROUTES[event.kind]
        payload = composer.compose(
            event, self.room_name(event.room_id), self.currency_symbol
        )
        actor_id = extract_actor(event.kind, event.fields)

        try:
            recipients = self.resolver.resolve(event.room_id, actor_id, category)
            if not recipients:
                logger.info(
                    f"{event.kind} in room {event.room_id}: no recipients to notify"
                )
                return DispatchReport()
            return self.dispatcher.send_to_users(recipients, payload)
        except Exception as e:
            logger.error(
                f"Failed to notify room {event.room_id} about {event.kind} "
                f"({event.record_id}): {e}"
            )
            return None

    def send_daily_reminders(self, now: Optional[datetime] = None) -> int:
        """
        Sends per-user task digests for every room. Returns the number of
        digests that reached at least one token.
        """
        start, end = utc_day_window(now or datetime.now(timezone.utc))
        try:
            rooms = self.directory.list_rooms()
        except Exception as e:
            logger.error(f"Daily reminders could not list rooms: {e}")
            return 0

        sent = 0
        for room in rooms:
            try:
                sent += self._remind_room(room.id, room.name, start, end)
            except Exception as e:
                logger.error(f"Daily reminders failed for room {room.id}: {e}")
        logger.info(f"Daily reminders for {start.date()}: {sent} digests sent")
        return sent

    def _remind_room(
        self, room_id: str, room_name: str, start: datetime, end: datetime
    ) -> int:
        instances = self.directory.list_task_instances(room_id, start, end)
        if not instances:
            return 0

        by_user: Dict[str, List[str]] = {}
        for instance in instances:
            if not instance.assigned_to:
                continue
            by_user.setdefault(instance.assigned_to, []).append(instance.title)

        sent = 0
        for uid, titles in by_user.items():
            if not allows(load_preferences(self.directory, uid), Category.TASK):
                continue
            payload = composer.compose_daily_digest(
                room_id, room_name or DEFAULT_ROOM_NAME, titles
            )
            report = self.dispatcher.send_to_users([uid], payload)
            if report.success_count:
                sent += 1
        return sent

    def broadcast(self, title: str, body: str, image_url: Optional[str] = None) -> str:
        payload = composer.compose_broadcast(title, body, image_url)
        return self.dispatcher.send_to_topic(ALL_USERS_TOPIC, payload)

    def announce(self, room_id: str, title: str, body: str) -> str:
        payload = composer.compose_announcement(
            room_id, title, body, self.room_name(room_id)
        )
        return self.dispatcher.send_to_topic(room_topic(room_id), payload)
