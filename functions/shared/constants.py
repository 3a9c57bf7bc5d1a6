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

# Maximum number of registration tokens accepted by one multicast call.
MAX_TOKENS_PER_BATCH = 500
MAX_CHAT_PREVIEW_LENGTH = 120

DEFAULT_ROOM_NAME = "Room"
DEFAULT_TASK_TITLE = "Task"
DEFAULT_EXPENSE_DESCRIPTION = "an expense"
DEFAULT_LINK_TARGET = "an item"
DEFAULT_CURRENCY_SYMBOL = "₹"

MAX_TITLE_LENGTH = 200
MAX_BODY_LENGTH = 1000

DAILY_REMINDER_SCHEDULE = "0 8 * * *"
DAILY_REMINDER_TIMEZONE = "UTC"
