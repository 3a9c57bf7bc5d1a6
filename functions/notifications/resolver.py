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
"""Works out which room members should hear about an event."""

import concurrent.futures
from typing import Dict, Optional, Set

from firebase_functions import logger

from notifications.directory import Directory
from shared.types import Category, UserPreferences

CATEGORY_TOGGLES: Dict[Category, str] = {
    Category.CHAT: "chat_notifications_enabled",
    Category.EXPENSE: "expense_payment_alerts_enabled",
    Category.TASK: "task_reminders_enabled",
}


def allows(prefs: Optional[UserPreferences], category: Category) -> bool:
    """
    Returns False only when the master toggle or the category toggle is
    explicitly switched off. Users without a preferences document are allowed.
    """
    if prefs is None:
        return True
    if prefs.notifications_enabled is False:
        return False
    toggle = CATEGORY_TOGGLES.get(category)
    if toggle is None:
        return True
    return getattr(prefs, toggle) is not False


def load_preferences(directory: Directory, uid: str) -> Optional[UserPreferences]:
    """
    Reads `uid`'s preferences. A failed read is logged and treated like a
    missing document, so the user stays opted in.
    """
    try:
        return directory.get_preferences(uid)
    except Exception as e:
        logger.warn(f"Could not read preferences for user {uid}: {e}")
        return None


class RecipientResolver:
    def __init__(self, directory: Directory, max_workers: int = 8):
        self.directory = directory
        self.max_workers = max_workers

    def _load_preferences(self, uid: str) -> Optional[UserPreferences]:
        return load_preferences(self.directory, uid)

    def resolve(
        self, room_id: str, actor_id: Optional[str], category: Category
    ) -> Set[str]:
        """
        Returns the members of `room_id` that should be notified, minus the
        actor. A missing room resolves to nobody.
        """
        room = self.directory.get_room(room_id)
        if room is None:
            logger.warn(f"Room {room_id} not found; no recipients resolved")
            return set()

        candidates = room.members - {actor_id} if actor_id else set(room.members)
        if not candidates:
            return set()

        ordered = sorted(candidates)
        workers = min(self.max_workers, len(ordered))
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            all_prefs = list(executor.map(self._load_preferences, ordered))

        return {
            uid for uid, prefs in zip(ordered, all_prefs) if allows(prefs, category)
        }
