"""
Digest dispatch: the scheduled daily pass and the on-demand single-user path.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Dict, Optional

from integration.resource_client import ResourceProviderClient
from models.digest import DispatchReport, UserDigest
from models.types import UserID
from notifications.change_aggregator import ChangeAggregator
from notifications.digest_renderer import DigestRenderer, validate_sections
from notifications.email_sender import EmailSender
from notifications.error_logger import log_notification_error
from notifications.subscriber_directory import SubscriberDirectory
from shared.config import get_max_workers, get_timezone
from shared.errors import NotFoundError, NotModifiedError
from shared.utils import compute_cutoff

logger = logging.getLogger(__name__)


class Dispatcher:
    """Orchestrates fetch, correlation, rendering and sending of digests."""

    def __init__(
        self,
        directory: Optional[SubscriberDirectory] = None,
        provider: Optional[ResourceProviderClient] = None,
        mailer: Optional[EmailSender] = None,
        renderer: Optional[DigestRenderer] = None,
        tz_name: Optional[str] = None,
        max_workers: Optional[int] = None,
        dry_run: bool = False,
    ):
        validate_sections()
        self.directory = directory or SubscriberDirectory()
        self.aggregator = ChangeAggregator(
            self.directory, provider or ResourceProviderClient()
        )
        self.mailer = mailer or EmailSender(self.directory)
        self.renderer = renderer or DigestRenderer()
        self.tz_name = tz_name or get_timezone()
        self.max_workers = max_workers or get_max_workers()
        self.dry_run = dry_run

    def cutoff_for(self, now: Optional[datetime] = None) -> datetime:
        return compute_cutoff(now or datetime.now().astimezone(), self.tz_name)

    def run_scheduled_pass(self, now: Optional[datetime] = None) -> DispatchReport:
        """
        Send digests to every daily subscriber with relevant changes.

        The change-map is fetched once and shared by all correlations. Sends run
        as independent tasks; a failed send is recorded in the report without
        stopping the others. Provider failures propagate.

        Args:
            now: Reference time for the cutoff (defaults to the current time)

        Returns:
            DispatchReport listing sent and failed users
        """
        cutoff = self.cutoff_for(now)
        logger.info("Sending scheduled notifications for changes since %s", cutoff.isoformat())

        change_map = self.aggregator.fetch_change_map(cutoff)
        digests = self.aggregator.build_all_digests(change_map)
        report = DispatchReport(cutoff=cutoff, dry_run=self.dry_run)
        if not digests:
            logger.info("No digests to send")
            return report

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures: Dict[UserID, Future] = {
                user_id: executor.submit(self._deliver, user_id, digest)
                for user_id, digest in digests.items()
            }

        for user_id, future in futures.items():
            error = future.exception()
            if error is None:
                report.sent.append(user_id)
                continue

            report.failed[user_id] = str(error)
            error_file = log_notification_error(
                error_type="sending",
                error_message=str(error),
                context={
                    "user_id": user_id,
                    "cutoff": cutoff.isoformat(),
                    "changes": digests[user_id].total,
                },
            )
            logger.error(
                "Failed to send digest to user %s: %s (details: %s)",
                user_id,
                error,
                error_file,
            )

        logger.info(
            "Scheduled pass complete: %d sent, %d failed",
            len(report.sent),
            len(report.failed),
        )
        return report

    def notify_user(self, user_id: UserID, now: Optional[datetime] = None) -> None:
        """
        Send one user their digest on demand.

        Raises:
            NotFoundError: User absent or not on the daily subscription
            NotModifiedError: Nothing the user follows has changed
            UpstreamUnavailableError: Provider call failed
            SendFailureError: Mail could not be sent
        """
        subscriber = self.directory.find_by_id(user_id)
        if subscriber is None or not subscriber.is_daily:
            raise NotFoundError(user_id)

        cutoff = self.cutoff_for(now)
        change_map = self.aggregator.fetch_change_map(cutoff, user_id=user_id)
        digest = self.aggregator.correlate(subscriber, change_map)
        if digest is None:
            raise NotModifiedError(user_id)

        self._deliver(user_id, digest)

    def _deliver(self, user_id: UserID, digest: UserDigest) -> None:
        message = self.renderer.render(digest)
        if self.dry_run:
            logger.info("[DRY RUN] Would send digest with %d changes to user %s", digest.total, user_id)
            return
        self.mailer.send(user_id, message)
