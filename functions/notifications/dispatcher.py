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
"""Delivers composed payloads through Firebase Cloud Messaging."""

import concurrent.futures
from dataclasses import dataclass, field
from typing import Iterable, List, Protocol, Sequence

from firebase_admin import messaging
from firebase_functions import logger

from notifications.directory import Directory
from shared.constants import MAX_TOKENS_PER_BATCH
from shared.types import NotificationPayload


@dataclass
class SendResult:
    success_count: int
    failure_count: int


@dataclass
class DispatchReport:
    """Outcome of one token-mode fan-out."""

    recipients: int = 0
    tokens: int = 0
    batches: int = 0
    success_count: int = 0
    failure_count: int = 0
    failed_batches: int = 0


class PushSender(Protocol):
    """The two push-platform calls the dispatcher makes."""

    def send_to_topic(self, topic: str, payload: NotificationPayload) -> str:
        ...

    def send_to_tokens(
        self, tokens: Sequence[str], payload: NotificationPayload
    ) -> SendResult:
        ...


class FcmPushSender:
    """PushSender backed by firebase_admin.messaging."""

    def __init__(self, android_channel_id: str, apns_sound: str = "default"):
        self.android_channel_id = android_channel_id
        self.apns_sound = apns_sound

    def _message_options(self, payload: NotificationPayload) -> dict:
        return {
            "notification": messaging.Notification(
                title=payload.title, body=payload.body, image=payload.image_url
            ),
            "data": dict(payload.data),
            "android": messaging.AndroidConfig(
                priority="high",
                notification=messaging.AndroidNotification(
                    channel_id=self.android_channel_id
                ),
            ),
            "apns": messaging.APNSConfig(
                payload=messaging.APNSPayload(aps=messaging.Aps(sound=self.apns_sound))
            ),
        }

    def send_to_topic(self, topic: str, payload: NotificationPayload) -> str:
        message = messaging.Message(topic=topic, **self._message_options(payload))
        return messaging.send(message)

    def send_to_tokens(
        self, tokens: Sequence[str], payload: NotificationPayload
    ) -> SendResult:
        message = messaging.MulticastMessage(
            tokens=list(tokens), **self._message_options(payload)
        )
        response = messaging.send_each_for_multicast(message)
        return SendResult(
            success_count=response.success_count,
            failure_count=response.failure_count,
        )


@dataclass
class InMemoryPushSender:
    """Records every push call instead of sending it."""

    topic_messages: List[tuple] = field(default_factory=list)
    token_batches: List[tuple] = field(default_factory=list)
    # Indices of token batches that should raise, for failure tests.
    failing_batches: set = field(default_factory=set)

    def send_to_topic(self, topic: str, payload: NotificationPayload) -> str:
        self.topic_messages.append((topic, payload))
        return f"projects/test/messages/{len(self.topic_messages)}"

    def send_to_tokens(
        self, tokens: Sequence[str], payload: NotificationPayload
    ) -> SendResult:
        index = len(self.token_batches)
        self.token_batches.append((list(tokens), payload))
        if index in self.failing_batches:
            raise RuntimeError(f"Simulated failure for batch {index}")
        return SendResult(success_count=len(tokens), failure_count=0)


def chunk(items: Sequence[str], size: int = MAX_TOKENS_PER_BATCH) -> List[List[str]]:
    """Splits `items` into consecutive batches of at most `size`."""
    if size < 1:
        raise ValueError("Batch size must be positive.")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class Dispatcher:
    def __init__(
        self,
        directory: Directory,
        sender: PushSender,
        max_workers: int = 8,
        batch_size: int = MAX_TOKENS_PER_BATCH,
    ):
        self.directory = directory
        self.sender = sender
        self.max_workers = max_workers
        self.batch_size = min(batch_size, MAX_TOKENS_PER_BATCH)

    def send_to_topic(self, topic: str, payload: NotificationPayload) -> str:
        """Single call addressed to a topic. Errors propagate to the caller."""
        message_id = self.sender.send_to_topic(topic, payload)
        logger.info(f"Sent '{payload.title}' to topic {topic}: {message_id}")
        return message_id

    def _load_tokens(self, uid: str) -> List[str]:
        try:
            return self.directory.get_tokens(uid)
        except Exception as e:
            logger.warn(f"Could not read push tokens for user {uid}: {e}")
            return []

    def _collect_tokens(self, recipients: List[str]) -> List[str]:
        if not recipients:
            return []
        workers = min(self.max_workers, len(recipients))
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            token_lists = list(executor.map(self._load_tokens, recipients))
        return [token for tokens in token_lists for token in tokens]

    def send_to_users(
        self, recipients: Iterable[str], payload: NotificationPayload
    ) -> DispatchReport:
        """
        Fans `payload` out to every registered token of `recipients`.

        Each batch is sent independently: a rejected batch is logged and
        counted, and the remaining batches are still attempted.
        """
        ordered = sorted(set(recipients))
        tokens = self._collect_tokens(ordered)
        report = DispatchReport(recipients=len(ordered), tokens=len(tokens))

        for batch in chunk(tokens, self.batch_size):
            if not batch:
                continue
            report.batches += 1
            try:
                result = self.sender.send_to_tokens(batch, payload)
            except Exception as e:
                report.failed_batches += 1
                report.failure_count += len(batch)
                logger.error(
                    f"Failed to send '{payload.title}' to a batch of {len(batch)} tokens: {e}"
                )
                continue
            report.success_count += result.success_count
            report.failure_count += result.failure_count

        logger.info(
            f"Dispatched '{payload.title}' to {report.recipients} users "
            f"({report.tokens} tokens, {report.batches} batches, "
            f"{report.failure_count} failures)"
        )
        return report
