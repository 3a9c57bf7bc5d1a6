"""
CLI helper to send a one-off broadcast to every subscribed client.

Example:
    python scripts/send_broadcast.py --project one-room-2c1a6 --title "New update" --body "Update now!"
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import firebase_admin

from notifications import composer
from notifications.dispatcher import FcmPushSender
from shared.config import get_settings
from shared.firebase_constants import ALL_USERS_TOPIC

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send a broadcast notification")
    parser.add_argument("--title", required=True, help="Notification title")
    parser.add_argument("--body", required=True, help="Notification body")
    parser.add_argument(
        "--image-url", default=None, help="Optional image shown with the message"
    )
    parser.add_argument(
        "--project",
        default=None,
        help="Firebase project id (defaults to the ambient credentials' project)",
    )
    parser.add_argument(
        "--topic", default=ALL_USERS_TOPIC, help="Topic to publish to"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    firebase_admin.initialize_app(
        options={"projectId": args.project} if args.project else None
    )

    settings = get_settings()
    sender = FcmPushSender(
        android_channel_id=settings.android_channel_id,
        apns_sound=settings.apns_sound,
    )
    payload = composer.compose_broadcast(args.title, args.body, args.image_url)

    logger.info("Sending broadcast notification to topic %s", args.topic)
    try:
        message_id = sender.send_to_topic(args.topic, payload)
    except Exception:
        logger.exception("Error sending message")
        return 1

    logger.info("Successfully sent message: %s", message_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
