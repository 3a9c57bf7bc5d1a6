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
from unittest.mock import MagicMock

from notifications.directory import InMemoryDirectory
from notifications.resolver import RecipientResolver, allows, load_preferences
from shared.types import Category, UserPreferences


class AllowsTest(unittest.TestCase):

    def test_missing_preferences_are_fully_enabled(self):
        for category in Category:
            self.assertTrue(allows(None, category))
            self.assertTrue(allows(UserPreferences(), category))

    def test_master_toggle_blocks_every_category(self):
        prefs = UserPreferences(notifications_enabled=False)
        for category in Category:
            with self.subTest(category=category):
                self.assertFalse(allows(prefs, category))

    def test_category_toggles(self):
        self.assertFalse(allows(UserPreferences(chat_notifications_enabled=False), Category.CHAT))
        self.assertTrue(allows(UserPreferences(chat_notifications_enabled=False), Category.TASK))
        self.assertFalse(
            allows(UserPreferences(expense_payment_alerts_enabled=False), Category.EXPENSE)
        )
        self.assertFalse(allows(UserPreferences(task_reminders_enabled=False), Category.TASK))

    def test_uncategorised_events_only_check_master(self):
        prefs = UserPreferences(
            chat_notifications_enabled=False,
            expense_payment_alerts_enabled=False,
            task_reminders_enabled=False,
        )
        self.assertTrue(allows(prefs, Category.BROADCAST))
        self.assertTrue(allows(prefs, Category.ANNOUNCEMENT))


class RecipientResolverTest(unittest.TestCase):

    def setUp(self):
        self.directory = InMemoryDirectory()
        self.directory.add_room("room1", "Flat 4B", ["alice", "bob", "carol", "dave"])
        self.resolver = RecipientResolver(self.directory, max_workers=2)

    def test_actor_is_excluded(self):
        recipients = self.resolver.resolve("room1", "alice", Category.CHAT)
        self.assertEqual(recipients, {"bob", "carol", "dave"})

    def test_no_actor_notifies_all_members(self):
        recipients = self.resolver.resolve("room1", None, Category.TASK)
        self.assertEqual(recipients, {"alice", "bob", "carol", "dave"})

    def test_unknown_actor_is_a_no_op(self):
        recipients = self.resolver.resolve("room1", "mallory", Category.TASK)
        self.assertEqual(recipients, {"alice", "bob", "carol", "dave"})

    def test_actor_as_sole_member_resolves_to_nobody(self):
        self.directory.add_room("solo", "Solo", ["alice"])
        self.assertEqual(self.resolver.resolve("solo", "alice", Category.CHAT), set())

    def test_missing_room_resolves_to_nobody(self):
        self.assertEqual(self.resolver.resolve("nope", "alice", Category.CHAT), set())

    def test_preferences_filter_recipients(self):
        self.directory.preferences["bob"] = UserPreferences(notifications_enabled=False)
        self.directory.preferences["carol"] = UserPreferences(
            expense_payment_alerts_enabled=False
        )

        expense = self.resolver.resolve("room1", "alice", Category.EXPENSE)
        chat = self.resolver.resolve("room1", "alice", Category.CHAT)

        self.assertEqual(expense, {"dave"})
        self.assertEqual(chat, {"carol", "dave"})

    def test_failed_preference_read_keeps_user_opted_in(self):
        self.directory.preferences["carol"] = UserPreferences(notifications_enabled=False)
        directory = MagicMock(wraps=self.directory)
        real_get_preferences = self.directory.get_preferences

        def get_preferences(uid):
            if uid == "bob":
                raise RuntimeError("firestore down")
            return real_get_preferences(uid)

        directory.get_preferences.side_effect = get_preferences
        resolver = RecipientResolver(directory)

        recipients = resolver.resolve("room1", "alice", Category.CHAT)

        self.assertEqual(recipients, {"bob", "dave"})

    def test_load_preferences_returns_none_on_error(self):
        directory = MagicMock()
        directory.get_preferences.side_effect = RuntimeError("firestore down")

        self.assertIsNone(load_preferences(directory, "bob"))


class UserPreferencesDocumentTest(unittest.TestCase):

    def test_from_camel_case_document(self):
        prefs = UserPreferences.from_document(
            {
                "notificationsEnabled": True,
                "chatNotificationsEnabled": False,
                "displayName": "Alice",
            }
        )
        self.assertEqual(
            prefs,
            UserPreferences(
                notifications_enabled=True,
                chat_notifications_enabled=False,
                expense_payment_alerts_enabled=True,
                task_reminders_enabled=True,
            ),
        )

    def test_null_and_missing_fields_default_to_enabled(self):
        prefs = UserPreferences.from_document({"taskRemindersEnabled": None})
        self.assertEqual(prefs, UserPreferences())
        self.assertEqual(UserPreferences.from_document(None), UserPreferences())


if __name__ == "__main__":
    unittest.main()
