"""
Change aggregation for daily digests.

Builds the per-pass change-map (URI -> ChangeRecord) from the resource
provider and correlates it against each subscriber's followed resources.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from integration.resource_client import ResourceProviderClient
from models.digest import UserDigest
from models.resource import ACTIVE_APPLICATIONS, Application, ChangeRecord
from models.subscriber import Subscriber
from models.types import UserID
from notifications.subscriber_directory import SubscriberDirectory

logger = logging.getLogger(__name__)

ChangeMap = Dict[str, ChangeRecord]

_ACTIVE_TAGS: Dict[str, Application] = {app.value: app for app in ACTIVE_APPLICATIONS}


class ChangeAggregator:
    """Fetches changed resources and matches them to subscribers."""

    def __init__(
        self,
        directory: SubscriberDirectory,
        provider: ResourceProviderClient,
    ):
        self.directory = directory
        self.provider = provider

    def fetch_changes(
        self,
        application: Application,
        cutoff: datetime,
        user_id: Optional[UserID] = None,
    ) -> ChangeMap:
        """
        Fetch resources of one application that changed after the cutoff.

        With a user_id only that user's followed resources are queried (latest
        revisions only); otherwise every followed resource of the application.

        Args:
            application: Application to query
            cutoff: Changes after this instant are reported
            user_id: Optional user to narrow the query to

        Returns:
            Mapping of resource URI to ChangeRecord (empty when nothing changed)
        """
        uris = self.directory.get_followed_uris(application.value, user_id=user_id)
        if not uris:
            logger.info(
                "No followed resources for %s%s, skipping provider call",
                application.value,
                f" (user {user_id})" if user_id is not None else "",
            )
            return {}

        response = self.provider.get_changes(
            application,
            uris,
            cutoff,
            fetch_date_range_changes=True,
            latest_only=user_id is not None,
        )
        if not response.results:
            logger.info("No resources have updates for %s", application.value)
            return {}

        logger.info(
            "Found %d updated resources for application: %s",
            len(response.results),
            application.value,
        )
        return {record.uri: record for record in response.results}

    def fetch_change_map(
        self, cutoff: datetime, user_id: Optional[UserID] = None
    ) -> ChangeMap:
        """Merge the changes of every active application into one change-map."""
        change_map: ChangeMap = {}
        for application in ACTIVE_APPLICATIONS:
            change_map.update(self.fetch_changes(application, cutoff, user_id=user_id))
        return change_map

    def correlate(
        self, subscriber: Subscriber, change_map: ChangeMap
    ) -> Optional[UserDigest]:
        """
        Collect the changes relevant to one subscriber.

        Membership is an exact URI match against the change-map. Followed
        resources tagged with an inactive or unknown application are skipped.

        Returns:
            UserDigest with sorted buckets, or None when nothing matched
        """
        if not subscriber.resources:
            return None

        buckets: Dict[Application, List[ChangeRecord]] = {}
        for resource in subscriber.resources:
            record = change_map.get(resource.uri)
            if record is None:
                continue

            application = _ACTIVE_TAGS.get(resource.application.lower())
            if application is None:
                logger.warning(
                    "Unknown application type: %s (user %s, resource %s)",
                    resource.application,
                    subscriber.id,
                    resource.uri,
                )
                continue
            buckets.setdefault(application, []).append(record)

        if not any(buckets.values()):
            return None

        return UserDigest(
            user_id=subscriber.id,
            buckets={app: sorted(records) for app, records in buckets.items()},
        )

    def build_all_digests(self, change_map: ChangeMap) -> Dict[UserID, UserDigest]:
        """Correlate the change-map with every daily subscriber."""
        digests: Dict[UserID, UserDigest] = {}
        if not change_map:
            return digests

        for subscriber in self.directory.find_all_daily_subscribers():
            if not subscriber.is_daily:
                continue
            digest = self.correlate(subscriber, change_map)
            if digest is not None:
                digests[subscriber.id] = digest

        logger.info("Built digests for %d subscribers", len(digests))
        return digests
