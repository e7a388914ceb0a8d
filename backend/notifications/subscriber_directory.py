"""
Subscriber directory backed by Supabase.

Reads user profiles (subscription mode, email) and the resources each user
follows. Tables:
    user_profiles(id, email, subscription_type)
    user_resources(user_id, uri, application)
"""

from typing import Any, Callable, Dict, List, Optional, Set

from models.subscriber import SUBSCRIPTION_TYPE_DAILY, FollowedResource, Subscriber
from models.types import ResourceURI, UserID
from shared.db import get_supabase_client

# PostgREST returns at most max-rows (default 1000) rows per request
PAGE_SIZE = 1000

# User ids per in.(...) filter, keeps request URLs short
ID_BATCH_SIZE = 200


class SubscriberDirectory:
    """Lookups of subscribers and their followed resources."""

    def __init__(self, client: Any = None):
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def find_by_id(self, user_id: UserID) -> Optional[Subscriber]:
        """Fetch one subscriber with followed resources, or None if absent."""
        response = (
            self.client.table("user_profiles")
            .select("id, email, subscription_type")
            .eq("id", user_id)
            .execute()
        )
        if not response.data:
            return None

        profile = response.data[0]
        resources = self._fetch_resources([profile["id"]])
        return self._to_subscriber(profile, resources.get(profile["id"], []))

    def find_all_daily_subscribers(self) -> List[Subscriber]:
        """Fetch every subscriber on the daily subscription mode."""
        rows = self._fetch_all_rows(
            lambda: self.client.table("user_profiles")
            .select("id, email, subscription_type")
            .ilike("subscription_type", SUBSCRIPTION_TYPE_DAILY)
            .order("id")
        )
        profiles = [
            p
            for p in rows
            if (p.get("subscription_type") or "").upper() == SUBSCRIPTION_TYPE_DAILY
        ]
        if not profiles:
            return []

        resources_by_user = self._fetch_resources([p["id"] for p in profiles])
        return [
            self._to_subscriber(profile, resources_by_user.get(profile["id"], []))
            for profile in profiles
        ]

    def get_followed_uris(
        self, application: str, user_id: Optional[UserID] = None
    ) -> Set[ResourceURI]:
        """
        Get URIs followed for an application.

        Args:
            application: Application tag to filter by
            user_id: Limit to one user's follows; all users when omitted

        Returns:
            Set of followed resource URIs
        """

        def build_query():
            query = (
                self.client.table("user_resources")
                .select("uri")
                .eq("application", application)
            )
            if user_id is not None:
                query = query.eq("user_id", user_id)
            return query.order("uri")

        rows = self._fetch_all_rows(build_query)
        return {ResourceURI(row["uri"]) for row in rows if row.get("uri")}

    def get_email(self, user_id: UserID) -> Optional[str]:
        """Recipient address for a user, if one is on file."""
        response = (
            self.client.table("user_profiles")
            .select("email")
            .eq("id", user_id)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("email")

    def _fetch_resources(
        self, user_ids: List[str]
    ) -> Dict[str, List[Dict[str, Any]]]:
        """Fetch followed resources for the given users, grouped by user_id."""
        resources_by_user: Dict[str, List[Dict[str, Any]]] = {}
        for start in range(0, len(user_ids), ID_BATCH_SIZE):
            batch = user_ids[start : start + ID_BATCH_SIZE]
            rows = self._fetch_all_rows(
                lambda: self.client.table("user_resources")
                .select("user_id, uri, application")
                .in_("user_id", batch)
                .order("user_id")
                .order("uri")
            )
            for row in rows:
                resources_by_user.setdefault(row["user_id"], []).append(row)
        return resources_by_user

    @staticmethod
    def _fetch_all_rows(build_query: Callable[[], Any]) -> List[Dict[str, Any]]:
        """Run a query page by page with .range() until a short page comes back."""
        rows: List[Dict[str, Any]] = []
        start = 0
        while True:
            response = build_query().range(start, start + PAGE_SIZE - 1).execute()
            page = response.data or []
            rows.extend(page)
            if len(page) < PAGE_SIZE:
                return rows
            start += PAGE_SIZE

    @staticmethod
    def _to_subscriber(
        profile: Dict[str, Any], resources: List[Dict[str, Any]]
    ) -> Subscriber:
        return Subscriber(
            id=UserID(profile["id"]),
            email=profile.get("email") or None,
            subscription_type=profile.get("subscription_type"),
            resources=frozenset(
                FollowedResource(uri=row["uri"], application=row["application"])
                for row in resources
                if row.get("uri") and row.get("application")
            ),
        )
