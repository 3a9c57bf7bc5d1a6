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

# Cloud functions for OneRoom - push notifications for room activity.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
import hmac
import json
from dataclasses import asdict, dataclass
from typing import Optional

# Third-party library imports
from firebase_admin import initialize_app
from firebase_functions import https_fn, logger, options, scheduler_fn
from firebase_functions.firestore_fn import (
    on_document_created,
    on_document_deleted,
    on_document_updated,
    Event,
    Change,
    DocumentSnapshot,
)

# Local application imports
from notifications.dependencies import get_router
from shared.config import get_settings
from shared.constants import (
    DAILY_REMINDER_SCHEDULE,
    DAILY_REMINDER_TIMEZONE,
    MAX_BODY_LENGTH,
    MAX_TITLE_LENGTH,
)
from shared.firebase_constants import (
    ALL_USERS_TOPIC,
    CHATS_COLLECTION,
    EXPENSES_COLLECTION,
    ROOMS_COLLECTION,
    TASKS_COLLECTION,
    room_topic,
)
from shared.json_utils import convert_keys
from shared.types import DomainEvent, EventKind

CHAT_DOCUMENT = ROOMS_COLLECTION + "/{roomId}/" + CHATS_COLLECTION + "/{chatId}"
EXPENSE_DOCUMENT = (
    ROOMS_COLLECTION + "/{roomId}/" + EXPENSES_COLLECTION + "/{expenseId}"
)
TASK_DOCUMENT = ROOMS_COLLECTION + "/{roomId}/" + TASKS_COLLECTION + "/{taskId}"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

initialize_app()


@dataclass
class SendNotificationResult:
    status: str
    topic: str
    message_id: Optional[str] = None


def _snapshot_data(snapshot: Optional[DocumentSnapshot]) -> Optional[dict]:
    if snapshot is None:
        return None
    return snapshot.to_dict()


def _route_created(
    event: Event[Optional[DocumentSnapshot]], kind: EventKind, id_param: str
):
    get_router().handle(
        DomainEvent(
            kind=kind,
            room_id=event.params["roomId"],
            record_id=event.params.get(id_param),
            after=_snapshot_data(event.data),
        )
    )


def _route_updated(
    event: Event[Optional[Change[Optional[DocumentSnapshot]]]],
    kind: EventKind,
    id_param: str,
):
    if event.data is None:
        return
    get_router().handle(
        DomainEvent(
            kind=kind,
            room_id=event.params["roomId"],
            record_id=event.params.get(id_param),
            before=_snapshot_data(event.data.before),
            after=_snapshot_data(event.data.after),
        )
    )


def _route_deleted(
    event: Event[Optional[DocumentSnapshot]], kind: EventKind, id_param: str
):
    get_router().handle(
        DomainEvent(
            kind=kind,
            room_id=event.params["roomId"],
            record_id=event.params.get(id_param),
            before=_snapshot_data(event.data),
        )
    )


@on_document_created(document=CHAT_DOCUMENT)
def on_chat_created(event: Event[Optional[DocumentSnapshot]]) -> None:
    """Notifies room members (except the sender) about a new chat message."""
    _route_created(event, EventKind.CHAT_MESSAGE_CREATED, "chatId")


@on_document_created(document=EXPENSE_DOCUMENT)
def on_expense_created(event: Event[Optional[DocumentSnapshot]]) -> None:
    _route_created(event, EventKind.EXPENSE_CREATED, "expenseId")


@on_document_updated(document=EXPENSE_DOCUMENT)
def on_expense_updated(
    event: Event[Optional[Change[Optional[DocumentSnapshot]]]],
) -> None:
    _route_updated(event, EventKind.EXPENSE_UPDATED, "expenseId")


@on_document_deleted(document=EXPENSE_DOCUMENT)
def on_expense_deleted(event: Event[Optional[DocumentSnapshot]]) -> None:
    _route_deleted(event, EventKind.EXPENSE_DELETED, "expenseId")


@on_document_created(document=TASK_DOCUMENT)
def on_task_created(event: Event[Optional[DocumentSnapshot]]) -> None:
    _route_created(event, EventKind.TASK_CREATED, "taskId")


@on_document_updated(document=TASK_DOCUMENT)
def on_task_updated(
    event: Event[Optional[Change[Optional[DocumentSnapshot]]]],
) -> None:
    _route_updated(event, EventKind.TASK_UPDATED, "taskId")


@on_document_deleted(document=TASK_DOCUMENT)
def on_task_deleted(event: Event[Optional[DocumentSnapshot]]) -> None:
    _route_deleted(event, EventKind.TASK_DELETED, "taskId")


@scheduler_fn.on_schedule(
    schedule=DAILY_REMINDER_SCHEDULE,
    timezone=scheduler_fn.Timezone(DAILY_REMINDER_TIMEZONE),
)
def daily_task_reminders(event: scheduler_fn.ScheduledEvent) -> None:
    """
    Sends each assignee a digest of the task instances scheduled for today
    (UTC), one notification per room.
    """
    get_router().send_daily_reminders(event.schedule_time)


def _validate_text_fields(data: dict, required: list[str]) -> None:
    missing = [name for name in required if not data.get(name)]
    if missing:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            f"Must specify {', '.join(missing)} parameter(s).",
        )
    if len(str(data["title"])) > MAX_TITLE_LENGTH:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Title exceeds max length.",
        )
    if len(str(data["body"])) > MAX_BODY_LENGTH:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Body exceeds max length.",
        )


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def send_broadcast_notification(req: https_fn.CallableRequest) -> dict:
    """
    Sends a notification to every client subscribed to the all-users topic.

    Args:
        req (https_fn.CallableRequest): The request, containing title, body and
            an optional imageUrl.

    Returns:
        A dictionary representation of the SendNotificationResult object.
    """
    data = req.data if isinstance(req.data, dict) else {}
    _validate_text_fields(data, ["title", "body"])

    try:
        message_id = get_router().broadcast(
            str(data["title"]), str(data["body"]), data.get("imageUrl")
        )
    except Exception as e:
        logger.error(f"Broadcast failed: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL, f"Failed to send broadcast: {e}"
        )

    result = SendNotificationResult(
        status="success", topic=ALL_USERS_TOPIC, message_id=message_id
    )
    return convert_keys(asdict(result), "snake_to_camel")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def send_room_announcement(req: https_fn.CallableRequest) -> dict:
    """
    Sends an announcement to the topic of a single room.

    Args:
        req (https_fn.CallableRequest): The request, containing roomId, title
            and body.
    """
    data = req.data if isinstance(req.data, dict) else {}
    _validate_text_fields(data, ["roomId", "title", "body"])
    room_id = str(data["roomId"])

    try:
        message_id = get_router().announce(
            room_id, str(data["title"]), str(data["body"])
        )
    except Exception as e:
        logger.error(f"Announcement to room {room_id} failed: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL, f"Failed to send announcement: {e}"
        )

    result = SendNotificationResult(
        status="success", topic=room_topic(room_id), message_id=message_id
    )
    return convert_keys(asdict(result), "snake_to_camel")


def _json_response(body: dict, status: int) -> https_fn.Response:
    return https_fn.Response(
        json.dumps(body),
        status=status,
        headers=CORS_HEADERS,
        content_type="application/json",
    )


def _secret_matches(provided) -> bool:
    expected = get_settings().broadcast_secret
    if not expected or not isinstance(provided, str):
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


@https_fn.on_request(memory=options.MemoryOption.MB_256)
def broadcast_http(req: https_fn.Request) -> https_fn.Response:
    """
    Plain HTTP broadcast for admin tooling, guarded by a shared secret.

    Expects a POST with a JSON body {title, body, secret}.
    """
    if req.method == "OPTIONS":
        return https_fn.Response("", status=204, headers=CORS_HEADERS)
    if req.method != "POST":
        return _json_response({"error": "Method not allowed"}, 405)

    data = req.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    if not _secret_matches(data.get("secret")):
        logger.warn("Rejected broadcast request with an invalid secret")
        return _json_response({"error": "Unauthorized"}, 403)

    title = data.get("title")
    body = data.get("body")
    if not title or not body:
        return _json_response({"error": "Title and body are required"}, 400)

    try:
        message_id = get_router().broadcast(
            str(title), str(body), data.get("imageUrl")
        )
    except Exception as e:
        logger.error(f"Broadcast failed: {e}")
        return _json_response({"error": f"Failed to send broadcast: {e}"}, 500)

    return _json_response({"success": True, "messageId": message_id}, 200)
