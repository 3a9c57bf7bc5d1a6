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

ROOMS_COLLECTION = "rooms"
CHATS_COLLECTION = "chats"
EXPENSES_COLLECTION = "expenses"
TASKS_COLLECTION = "tasks"
TASK_INSTANCES_COLLECTION = "taskInstances"
USERS_COLLECTION = "users"
TOKENS_COLLECTION = "tokens"

ALL_USERS_TOPIC = "all_users"
ROOM_TOPIC_PREFIX = "room_"


def room_topic(room_id: str) -> str:
    return f"{ROOM_TOPIC_PREFIX}{room_id}"
