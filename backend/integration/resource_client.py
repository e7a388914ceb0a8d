"""
Client for the resource provider's "changed since" integration endpoints.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

import requests
from pydantic import ValidationError

from models.resource import Application, ProviderResponse
from shared.config import get_provider_timeout, get_provider_url
from shared.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

PATH_API = "/api"
PATH_V1 = "/v1"
PATH_INTEGRATION = "/updates"
PATH_RESOURCES = "/resources"
PATH_LATEST_RESOURCES = "/latestresources"


class ResourceProviderClient:
    """Fetches resources that changed since a cutoff from the upstream catalog"""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Accept": "application/json", "Content-Type": "application/json"}
        )
        self.timeout = timeout if timeout is not None else get_provider_timeout()

    def build_url(self, application: Application, latest_only: bool) -> str:
        endpoint = PATH_LATEST_RESOURCES if latest_only else PATH_RESOURCES
        return f"{get_provider_url(application)}{PATH_API}{PATH_V1}{PATH_INTEGRATION}{endpoint}"

    def get_changes(
        self,
        application: Application,
        uris: Optional[Iterable[str]],
        cutoff: datetime,
        fetch_date_range_changes: bool = True,
        latest_only: bool = False,
    ) -> ProviderResponse:
        """
        Fetch resources among `uris` that changed after `cutoff`.

        Args:
            application: Application whose provider is queried
            uris: Resource URIs to check; empty or None yields an empty response
            cutoff: Only changes after this instant are reported
            fetch_date_range_changes: Ask the provider for content changes in the range
            latest_only: Only report the latest revision of each resource

        Returns:
            ProviderResponse with the changed resources

        Raises:
            UpstreamUnavailableError: On network errors, timeouts, bad statuses
                or an unparseable response body
        """
        if not uris:
            return ProviderResponse()
        uri_list = sorted(set(uris))
        if not uri_list:
            return ProviderResponse()

        url = self.build_url(application, latest_only)
        payload = {
            "uris": uri_list,
            "after": cutoff.isoformat(),
            "getDateRangeChanges": fetch_date_range_changes,
        }
        logger.info(
            "Fetching changes for %s: %d uris since %s",
            application.value,
            len(uri_list),
            cutoff.isoformat(),
        )

        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json() if response.content else {}
        except requests.RequestException as e:
            raise UpstreamUnavailableError(application.value, str(e)) from e
        except ValueError as e:
            raise UpstreamUnavailableError(
                application.value, f"invalid JSON response: {e}"
            ) from e

        try:
            return ProviderResponse.model_validate(body or {})
        except ValidationError as e:
            raise UpstreamUnavailableError(
                application.value, f"unexpected response shape: {e}"
            ) from e
