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
"""Turns domain events into human-readable notification payloads.

Everything here is pure: the same snapshot and room name always produce the
same title, body and data map.
"""

import math
from typing import Any, Dict, List, Optional

from shared.constants import (
    DEFAULT_CURRENCY_SYMBOL,
    DEFAULT_EXPENSE_DESCRIPTION,
    DEFAULT_LINK_TARGET,
    DEFAULT_TASK_TITLE,
    MAX_CHAT_PREVIEW_LENGTH,
)
from shared.types import (
    Action,
    Category,
    DomainEvent,
    EVENT_ROUTES,
    NotificationPayload,
)

CHAT_BODIES = {
    "image": "Sent a photo",
    "video": "Sent a video",
    "audio": "Sent an audio message",
    "reminder": "Sent a payment reminder",
}
CHAT_FALLBACK_BODY = "New message"

EXPENSE_TITLES = {
    Action.CREATED: "💰 New expense in {room}",
    Action.UPDATED: "✏️ Expense updated in {room}",
    Action.DELETED: "🗑️ Expense deleted in {room}",
}
TASK_TITLES = {
    Action.CREATED: "✅ New task in {room}",
    Action.UPDATED: "✏️ Task updated in {room}",
    Action.DELETED: "🗑️ Task deleted in {room}",
}
VERBS = {
    Action.CREATED: "Created",
    Action.UPDATED: "Updated",
    Action.DELETED: "Deleted",
}

SCREENS = {
    Category.CHAT: "chat",
    Category.EXPENSE: "expenses",
    Category.TASK: "tasks",
    Category.BROADCAST: "dashboard",
    Category.ANNOUNCEMENT: "dashboard",
}
REMINDER_TITLE = "⏰ Task reminder"
REMINDER_SCREEN = "my_tasks"


def _stringify(data: Dict[str, Any]) -> Dict[str, str]:
    """FCM data values must be strings."""
    return {key: str(value) for key, value in data.items() if value is not None}


def _format_amount(amount: Any) -> Optional[str]:
    if amount is None or isinstance(amount, bool):
        return None
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return f"{value:.2f}"


def chat_preview(fields: Dict[str, Any]) -> str:
    message_type = fields.get("type") or "text"
    if message_type == "text":
        text = fields.get("text")
        if text:
            return str(text)[:MAX_CHAT_PREVIEW_LENGTH]
        return CHAT_FALLBACK_BODY
    if message_type == "poll":
        return f"Started a poll: {fields.get('pollQuestion') or ''}".strip()
    if message_type == "link":
        return f"Shared a link to {fields.get('linkType') or DEFAULT_LINK_TARGET}"
    return CHAT_BODIES.get(message_type, CHAT_FALLBACK_BODY)


def expense_description(fields: Dict[str, Any]) -> str:
    return fields.get("description") or DEFAULT_EXPENSE_DESCRIPTION


def task_title(fields: Dict[str, Any]) -> str:
    return fields.get("title") or fields.get("name") or DEFAULT_TASK_TITLE


def _room_data(
    category: Category, room_id: str, room_name: str, action: Optional[Action]
) -> Dict[str, str]:
    return _stringify(
        {
            "type": category,
            "roomId": room_id,
            "roomName": room_name,
            "screen": SCREENS[category],
            "action": action,
        }
    )


def compose(
    event: DomainEvent,
    room_name: str,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> NotificationPayload:
    """Builds the payload for a chat, expense or task record event."""
    if event.kind not in EVENT_ROUTES:
        raise ValueError(f"No payload for event kind {event.kind}")
    category, action = EVENT_ROUTES[event.kind]
    fields = event.fields

    if category == Category.CHAT:
        return NotificationPayload(
            title=f"💬 New message in {room_name}",
            body=chat_preview(fields),
            category=category,
            data=_room_data(category, event.room_id, room_name, None),
        )

    if category == Category.EXPENSE:
        description = expense_description(fields)
        body = f'{VERBS[action]} "{description}"'
        if action == Action.CREATED:
            body = f'Added "{description}"'
            amount = _format_amount(fields.get("amount"))
            if amount is not None:
                body = f"{body} - {currency_symbol}{amount}"
        return NotificationPayload(
            title=EXPENSE_TITLES[action].format(room=room_name),
            body=body,
            category=category,
            data=_room_data(category, event.room_id, room_name, action),
        )

    return NotificationPayload(
        title=TASK_TITLES[action].format(room=room_name),
        body=f'{VERBS[action]} "{task_title(fields)}"',
        category=category,
        data=_room_data(category, event.room_id, room_name, action),
    )


def compose_daily_digest(
    room_id: str, room_name: str, titles: List[str]
) -> NotificationPayload:
    if len(titles) == 1:
        body = f'Don\'t forget: "{titles[0]}" in {room_name}'
    else:
        body = f"You have {len(titles)} tasks today in {room_name}"
    return NotificationPayload(
        title=REMINDER_TITLE,
        body=body,
        category=Category.TASK,
        data=_stringify(
            {
                "type": Category.TASK,
                "screen": REMINDER_SCREEN,
                "roomId": room_id,
                "roomName": room_name,
                "action": Action.REMINDER,
            }
        ),
    )


def compose_broadcast(
    title: str, body: str, image_url: Optional[str] = None
) -> NotificationPayload:
    return NotificationPayload(
        title=title,
        body=body,
        category=Category.BROADCAST,
        data=_stringify(
            {"type": Category.BROADCAST, "screen": SCREENS[Category.BROADCAST]}
        ),
        image_url=image_url or None,
    )


def compose_announcement(
    room_id: str, title: str, body: str, room_name: Optional[str] = None
) -> NotificationPayload:
    return NotificationPayload(
        title=title,
        body=body,
        category=Category.ANNOUNCEMENT,
        data=_stringify(
            {
                "type": Category.ANNOUNCEMENT,
                "roomId": room_id,
                "roomName": room_name,
                "screen": SCREENS[Category.ANNOUNCEMENT],
            }
        ),
    )
