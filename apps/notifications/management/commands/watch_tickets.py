"""
Management command to watch tickets across all brands from a terminal.

Runs the same global poller the dashboard uses and prints each notification
as it is produced. The first poll only records a baseline.
"""

import logging
import os
import time
from typing import Any

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError, CommandParser

from apps.api_client.services import DispatchAPIError, SessionExpiredError
from apps.notifications.services import GlobalTicketPoller, MentionTracker
from apps.notifications.state import PollState

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Poll the Dispatch API and print ticket notifications."""

    help = "Watch all brands for new tickets, customer replies and status changes"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--token",
            type=str,
            default=os.environ.get("DISPATCH_SESSION_TOKEN"),
            help="Dispatch session token (defaults to $DISPATCH_SESSION_TOKEN)",
        )
        parser.add_argument(
            "--interval",
            type=int,
            default=settings.NOTIFICATION_POLL_INTERVAL_GLOBAL,
            help="Seconds between polls",
        )
        parser.add_argument(
            "--once",
            action="store_true",
            help="Poll twice (baseline + one diff) and exit",
        )
        parser.add_argument(
            "--mentions",
            action="store_true",
            help="Also report new @mentions",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        token = options["token"]
        if not token:
            raise CommandError("A session token is required (--token or DISPATCH_SESSION_TOKEN)")

        interval = max(1, options["interval"])
        poller = GlobalTicketPoller(token, PollState())
        mentions = MentionTracker(token, PollState()) if options["mentions"] else None

        self.stdout.write(f"Watching tickets every {interval}s (Ctrl+C to stop)")
        polls = 0
        try:
            while True:
                self._poll_once(poller, mentions)
                polls += 1
                if options["once"] and polls >= 2:  # noqa: PLR2004
                    return
                time.sleep(interval)
        except KeyboardInterrupt:
            self.stdout.write("Stopped")

    def _poll_once(self, poller: GlobalTicketPoller, mentions: MentionTracker | None) -> None:
        try:
            result = poller.poll()
            notifications = list(result.notifications)
            if mentions is not None:
                notifications.extend(mentions.poll()[1].notifications)
        except SessionExpiredError as e:
            raise CommandError(f"Session token rejected: {e}") from e
        except DispatchAPIError as e:
            self.stdout.write(self.style.WARNING(f"Poll failed: {e}"))
            return

        if result.seeded:
            self.stdout.write(f"Baseline recorded for {len(poller.state.snapshots)} tickets")
        for notification in notifications:
            self.stdout.write(self.style.SUCCESS(notification.title))
            if notification.description:
                self.stdout.write(f"  {notification.description}")
            self.stdout.write(f"  {notification.url}")
