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
Read-only lookups for rooms, user preferences, push tokens and task instances.

`FirestoreDirectory` reads the production collections; `InMemoryDirectory`
serves tests and local runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Protocol

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from shared.firebase_constants import (
    ROOMS_COLLECTION,
    TASK_INSTANCES_COLLECTION,
    TOKENS_COLLECTION,
    USERS_COLLECTION,
)
from shared.types import Room, TaskInstance, UserPreferences


class Directory(Protocol):
    """Interface for everything the notification pipeline reads."""

    def get_room(self, room_id: str) -> Optional[Room]:
        ...

    def list_rooms(self) -> List[Room]:
        ...

    def get_preferences(self, uid: str) -> Optional[UserPreferences]:
        ...

    def get_tokens(self, uid: str) -> List[str]:
        ...

    def list_task_instances(
        self, room_id: str, start: datetime, end: datetime
    ) -> List[TaskInstance]:
        ...


class FirestoreDirectory:
    """Directory backed by the app's Firestore collections."""

    def __init__(self, db=None):
        self._db = db

    @property
    def db(self):
        if self._db is None:
            self._db = firestore.client()
        return self._db

    def _room_ref(self, room_id: str):
        return self.db.collection(ROOMS_COLLECTION).document(room_id)

    def get_room(self, room_id: str) -> Optional[Room]:
        doc = self._room_ref(room_id).get()
        if not doc.exists:
            return None
        return Room.from_document(doc.id, doc.to_dict())

    def list_rooms(self) -> List[Room]:
        return [
            Room.from_document(doc.id, doc.to_dict())
            for doc in self.db.collection(ROOMS_COLLECTION).stream()
        ]

    def get_preferences(self, uid: str) -> Optional[UserPreferences]:
        doc = self.db.collection(USERS_COLLECTION).document(uid).get()
        if not doc.exists:
            return None
        return UserPreferences.from_document(doc.to_dict())

    def get_tokens(self, uid: str) -> List[str]:
        docs = (
            self.db.collection(USERS_COLLECTION)
            .document(uid)
            .collection(TOKENS_COLLECTION)
            .stream()
        )
        tokens = []
        for doc in docs:
            token = (doc.to_dict() or {}).get("token")
            if token:
                tokens.append(token)
        return tokens

    def list_task_instances(
        self, room_id: str, start: datetime, end: datetime
    ) -> List[TaskInstance]:
        query = (
            self._room_ref(room_id)
            .collection(TASK_INSTANCES_COLLECTION)
            .where(filter=FieldFilter("scheduledDate", ">=", start))
            .where(filter=FieldFilter("scheduledDate", "<", end))
        )
        return [
            TaskInstance.from_document(doc.id, doc.to_dict())
            for doc in query.stream()
        ]


@dataclass
class InMemoryDirectory:
    """Simple in-memory directory for development and tests."""

    rooms: Dict[str, Room] = field(default_factory=dict)
    preferences: Dict[str, UserPreferences] = field(default_factory=dict)
    tokens: Dict[str, List[str]] = field(default_factory=dict)
    task_instances: Dict[str, List[TaskInstance]] = field(default_factory=dict)

    def add_room(self, room_id: str, name: str, members) -> Room:
        room = Room(id=room_id, name=name, members=set(members))
        self.rooms[room_id] = room
        return room

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def list_rooms(self) -> List[Room]:
        return list(self.rooms.values())

    def get_preferences(self, uid: str) -> Optional[UserPreferences]:
        return self.preferences.get(uid)

    def get_tokens(self, uid: str) -> List[str]:
        return list(self.tokens.get(uid, []))

    def list_task_instances(
        self, room_id: str, start: datetime, end: datetime
    ) -> List[TaskInstance]:
        return [
            instance
            for instance in self.task_instances.get(room_id, [])
            if instance.scheduled_date is not None
            and start <= instance.scheduled_date < end
        ]
