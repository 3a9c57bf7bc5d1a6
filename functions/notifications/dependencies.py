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
Wires the production router from settings.
"""

from notifications.directory import FirestoreDirectory
from notifications.dispatcher import Dispatcher, FcmPushSender
from notifications.resolver import RecipientResolver
from notifications.router import EventRouter
from shared.config import get_settings

_router: EventRouter | None = None


def get_router() -> EventRouter:
    """
    Return a singleton router so warm function instances reuse the clients.
    """
    global _router
    if _router:
        return _router

    settings = get_settings()
    directory = FirestoreDirectory()
    sender = FcmPushSender(
        android_channel_id=settings.android_channel_id,
        apns_sound=settings.apns_sound,
    )
    _router = EventRouter(
        directory=directory,
        resolver=RecipientResolver(directory, settings.max_lookup_workers),
        dispatcher=Dispatcher(directory, sender, settings.max_lookup_workers),
        currency_symbol=settings.currency_symbol,
    )
    return _router
