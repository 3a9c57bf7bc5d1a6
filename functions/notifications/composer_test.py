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

import unittest

from notifications import composer
from shared.types import Category, DomainEvent, EventKind


def _event(kind, after=None, before=None, room_id="room1"):
    return DomainEvent(kind=kind, room_id=room_id, record_id="rec1", before=before, after=after)


class ChatPreviewTest(unittest.TestCase):

    def test_text_is_truncated_to_120_characters(self):
        text = "Hello world, this message is quite long... " * 5
        self.assertGreater(len(text), 120)

        payload = composer.compose(
            _event(EventKind.CHAT_MESSAGE_CREATED, {"type": "text", "text": text}),
            "Flat 4B",
        )

        self.assertEqual(payload.body, text[:120])
        self.assertEqual(payload.title, "💬 New message in Flat 4B")
        self.assertEqual(payload.category, Category.CHAT)

    def test_missing_type_defaults_to_text(self):
        self.assertEqual(composer.chat_preview({"text": "hi"}), "hi")

    def test_fixed_bodies_for_media_types(self):
        cases = {
            "image": "Sent a photo",
            "video": "Sent a video",
            "audio": "Sent an audio message",
            "reminder": "Sent a payment reminder",
        }
        for message_type, expected in cases.items():
            with self.subTest(message_type=message_type):
                self.assertEqual(
                    composer.chat_preview({"type": message_type}), expected
                )

    def test_poll_and_link(self):
        self.assertEqual(
            composer.chat_preview({"type": "poll", "pollQuestion": "Pizza?"}),
            "Started a poll: Pizza?",
        )
        self.assertEqual(
            composer.chat_preview({"type": "poll"}), "Started a poll:"
        )
        self.assertEqual(
            composer.chat_preview({"type": "link", "linkType": "expense"}),
            "Shared a link to expense",
        )
        self.assertEqual(
            composer.chat_preview({"type": "link"}), "Shared a link to an item"
        )

    def test_unknown_type_and_empty_text_fall_back(self):
        self.assertEqual(composer.chat_preview({"type": "sticker"}), "New message")
        self.assertEqual(composer.chat_preview({"type": "text", "text": ""}), "New message")

    def test_chat_data_map(self):
        payload = composer.compose(
            _event(EventKind.CHAT_MESSAGE_CREATED, {"text": "hi"}), "Flat 4B"
        )
        self.assertEqual(
            payload.data,
            {"type": "chat", "roomId": "room1", "roomName": "Flat 4B", "screen": "chat"},
        )


class ExpenseComposerTest(unittest.TestCase):

    def test_created_with_amount(self):
        payload = composer.compose(
            _event(EventKind.EXPENSE_CREATED, {"description": "Groceries", "amount": 42.5}),
            "Flat 4B",
        )

        self.assertEqual(payload.body, 'Added "Groceries" - ₹42.50')
        self.assertEqual(payload.title, "💰 New expense in Flat 4B")
        self.assertEqual(
            payload.data,
            {
                "type": "expense",
                "roomId": "room1",
                "roomName": "Flat 4B",
                "screen": "expenses",
                "action": "created",
            },
        )

    def test_created_without_amount_or_description(self):
        payload = composer.compose(_event(EventKind.EXPENSE_CREATED, {}), "Room")
        self.assertEqual(payload.body, 'Added "an expense"')

    def test_non_numeric_amount_is_omitted(self):
        payload = composer.compose(
            _event(EventKind.EXPENSE_CREATED, {"description": "Rent", "amount": "lots"}),
            "Room",
        )
        self.assertEqual(payload.body, 'Added "Rent"')

    def test_string_amount_and_custom_currency(self):
        payload = composer.compose(
            _event(EventKind.EXPENSE_CREATED, {"description": "Rent", "amount": "1200"}),
            "Room",
            currency_symbol="$",
        )
        self.assertEqual(payload.body, 'Added "Rent" - $1200.00')

    def test_updated_uses_post_update_state(self):
        payload = composer.compose(
            _event(
                EventKind.EXPENSE_UPDATED,
                before={"description": "Old"},
                after={"description": "New"},
            ),
            "Flat 4B",
        )
        self.assertEqual(payload.title, "✏️ Expense updated in Flat 4B")
        self.assertEqual(payload.body, 'Updated "New"')
        self.assertEqual(payload.data["action"], "updated")

    def test_deleted_uses_last_snapshot(self):
        payload = composer.compose(
            _event(EventKind.EXPENSE_DELETED, before={"description": "Taxi"}),
            "Flat 4B",
        )
        self.assertEqual(payload.title, "🗑️ Expense deleted in Flat 4B")
        self.assertEqual(payload.body, 'Deleted "Taxi"')
        self.assertEqual(payload.data["action"], "deleted")


class TaskComposerTest(unittest.TestCase):

    def test_title_fallbacks(self):
        self.assertEqual(composer.task_title({"title": "Dishes", "name": "x"}), "Dishes")
        self.assertEqual(composer.task_title({"name": "Laundry"}), "Laundry")
        self.assertEqual(composer.task_title({}), "Task")

    def test_created_updated_deleted(self):
        created = composer.compose(_event(EventKind.TASK_CREATED, {"title": "Dishes"}), "R")
        updated = composer.compose(_event(EventKind.TASK_UPDATED, after={"name": "Trash"}), "R")
        deleted = composer.compose(_event(EventKind.TASK_DELETED, before={}), "R")

        self.assertEqual((created.title, created.body), ("✅ New task in R", 'Created "Dishes"'))
        self.assertEqual((updated.title, updated.body), ("✏️ Task updated in R", 'Updated "Trash"'))
        self.assertEqual((deleted.title, deleted.body), ("🗑️ Task deleted in R", 'Deleted "Task"'))
        self.assertEqual(deleted.data["screen"], "tasks")
        self.assertEqual(deleted.data["action"], "deleted")

    def test_compose_is_repeatable(self):
        event = _event(EventKind.TASK_CREATED, {"title": "Dishes", "createdBy": "u1"})
        self.assertEqual(composer.compose(event, "R"), composer.compose(event, "R"))

    def test_tick_is_not_a_record_event(self):
        with self.assertRaises(ValueError):
            composer.compose(DomainEvent(kind=EventKind.DAILY_REMINDER_TICK), "R")


class DigestAndTopicComposerTest(unittest.TestCase):

    def test_single_task_digest(self):
        payload = composer.compose_daily_digest("room1", "Flat 4B", ["Dishes"])
        self.assertEqual(payload.title, "⏰ Task reminder")
        self.assertEqual(payload.body, 'Don\'t forget: "Dishes" in Flat 4B')
        self.assertEqual(
            payload.data,
            {
                "type": "task",
                "screen": "my_tasks",
                "roomId": "room1",
                "roomName": "Flat 4B",
                "action": "reminder",
            },
        )

    def test_plural_digest(self):
        payload = composer.compose_daily_digest("room1", "Flat 4B", ["Dishes", "Trash"])
        self.assertEqual(payload.body, "You have 2 tasks today in Flat 4B")

    def test_broadcast(self):
        payload = composer.compose_broadcast("Hi", "There", "https://img.test/a.png")
        self.assertEqual(payload.data, {"type": "broadcast", "screen": "dashboard"})
        self.assertEqual(payload.image_url, "https://img.test/a.png")
        self.assertIsNone(composer.compose_broadcast("Hi", "There", "").image_url)

    def test_announcement(self):
        payload = composer.compose_announcement("room1", "Hi", "There", "Flat 4B")
        self.assertEqual(payload.data["roomId"], "room1")
        self.assertEqual(payload.data["type"], "announcement")
        self.assertEqual(payload.category, Category.ANNOUNCEMENT)


if __name__ == "__main__":
    unittest.main()
