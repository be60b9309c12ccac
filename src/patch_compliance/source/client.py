"""Patch server API client for machine enumeration and update states.

The PatchServerClient wraps the server's administrative JSON API and turns
its responses into typed models. Every transport or protocol failure is
raised as SourceUnavailableError; there is no retry, the scheduler that
runs the reporter owns retry policy.

Example usage:
    from patch_compliance.config import ReportSettings
    from patch_compliance.source import PatchServerClient

    settings = ReportSettings(server="wsus01.corp.local")

    with PatchServerClient(settings) as client:
        for machine in client.list_machines("Workstations"):
            states = client.get_update_states(machine.id)
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import ValidationError

from patch_compliance.config import ReportSettings
from patch_compliance.models import MachineIdentity, UpdateStateRecord

from .endpoints import ENDPOINTS
from .exceptions import AuthenticationError, ScopeNotFoundError, SourceUnavailableError

logger = structlog.get_logger(__name__)


class PatchServerClient:
    """Client for the patch server's administrative API.

    Attributes:
        settings: ReportSettings configuration object.
        base_url: Base URL of the server API.

    Example:
        # As context manager (recommended)
        with PatchServerClient(settings) as client:
            machines = client.list_machines()

        # Manual connection management
        client = PatchServerClient(settings)
        client.connect()
        try:
            machines = client.list_machines()
        finally:
            client.close()
    """

    def __init__(
        self,
        settings: ReportSettings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the patch server client.

        Args:
            settings: Configuration settings for the server connection.
            transport: Optional httpx transport (used to stub the server in tests).
        """
        self.settings = settings
        self.base_url = settings.base_url
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def connect(self) -> None:
        """Create the HTTP client with the configured authentication."""
        if self._client is not None:
            return

        headers = {"Accept": "application/json"}
        auth = None
        if self.settings.api_token:
            headers["Authorization"] = f"Bearer {self.settings.api_token}"
        elif self.settings.username:
            auth = httpx.BasicAuth(self.settings.username, self.settings.password or "")

        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            auth=auth,
            verify=self.settings.verify_ssl,
            timeout=self.settings.request_timeout,
            transport=self._transport,
        )
        logger.info("connecting", base_url=self.base_url)

    def close(self) -> None:
        """Close the HTTP client. Safe to call when not connected."""
        if self._client is not None:
            self._client.close()
            self._client = None
        logger.debug("disconnected")

    def __enter__(self) -> "PatchServerClient":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def get_groups(self) -> List[Dict[str, Any]]:
        """Get the computer groups defined on the server.

        Returns:
            List of group dictionaries, each containing at least 'id' and 'name'.

        Raises:
            SourceUnavailableError: The request failed.
        """
        groups = self._get_items(ENDPOINTS.groups)
        logger.debug("groups_retrieved", count=len(groups))
        return groups

    def list_machines(self, scope: Optional[str] = None) -> List[MachineIdentity]:
        """List the machines in scope.

        Args:
            scope: Computer group name (case-insensitive). None means all
                registered machines.

        Returns:
            Machines in the order the server returned them.

        Raises:
            ScopeNotFoundError: The named group does not exist.
            SourceUnavailableError: The request failed or returned bad data.
        """
        params: Dict[str, str] = {}
        if scope:
            params["groupId"] = self._resolve_group_id(scope)

        items = self._get_items(ENDPOINTS.computers, params=params)
        machines = [self._parse_machine(item) for item in items]

        logger.info("machines_listed", count=len(machines), scope=scope or "all")
        return machines

    def get_update_states(self, machine_id: str) -> List[UpdateStateRecord]:
        """Get the raw per-update installation states for one machine.

        Args:
            machine_id: Server-side machine identifier.

        Returns:
            One record per (update, state) pairing; state tags are left raw.

        Raises:
            SourceUnavailableError: The request failed or returned bad data.
        """
        endpoint = ENDPOINTS.update_states.format(machine_id=machine_id)
        items = self._get_items(endpoint)

        try:
            records = [
                UpdateStateRecord(
                    update_id=str(item.get("updateId") or item.get("id") or ""),
                    state=str(item.get("state") or item.get("updateInstallationState") or ""),
                )
                for item in items
            ]
        except AttributeError as e:
            raise SourceUnavailableError(
                message=f"Malformed update state data for machine {machine_id}: {e}"
            )

        logger.debug("update_states_retrieved", machine_id=machine_id, count=len(records))
        return records

    def _resolve_group_id(self, scope: str) -> str:
        """Find the id of the group whose name matches scope."""
        groups = self.get_groups()
        wanted = scope.strip().lower()
        for group in groups:
            if str(group.get("name", "")).lower() == wanted:
                logger.info("scope_selected", scope=group.get("name"), group_id=group.get("id"))
                return str(group.get("id"))

        raise ScopeNotFoundError(
            scope=scope,
            available_groups=[str(g.get("name")) for g in groups if g.get("name")],
        )

    def _parse_machine(self, item: Any) -> MachineIdentity:
        """Convert one computer payload into a MachineIdentity."""
        if not isinstance(item, dict):
            raise SourceUnavailableError(message=f"Malformed computer entry: {item!r}")

        groups = []
        for group in item.get("groups") or item.get("computerGroups") or []:
            name = group.get("name") if isinstance(group, dict) else group
            if name:
                groups.append(str(name))

        try:
            return MachineIdentity(
                id=str(item["id"]),
                computer_name=str(item.get("name") or item.get("fullDomainName") or item["id"]),
                group_names=groups,
                os_description=str(item.get("osDescription") or ""),
                last_sync=item.get("lastSyncTime"),
            )
        except (KeyError, ValidationError) as e:
            raise SourceUnavailableError(message=f"Malformed computer entry {item.get('id')!r}: {e}")

    def _get_items(
        self,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
    ) -> List[Any]:
        """GET an endpoint and unwrap its list payload.

        The API may wrap lists in {"data": [...]}.
        """
        response = self._request("GET", endpoint, params=params)

        try:
            data = response.json()
        except ValueError as e:
            raise SourceUnavailableError(message=f"Invalid JSON from {endpoint}: {e}")

        if isinstance(data, dict) and "data" in data:
            data = data["data"]
        if not isinstance(data, list):
            raise SourceUnavailableError(
                message=f"Unexpected response from {endpoint}: expected a list, got {type(data).__name__}"
            )
        return data

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """Make a request, mapping every failure to SourceUnavailableError."""
        if self._client is None:
            raise RuntimeError("Not connected. Call connect() first.")

        try:
            response = self._client.request(method, endpoint, **kwargs)
        except httpx.TimeoutException as e:
            logger.error("request_timeout", endpoint=endpoint, error=str(e))
            raise SourceUnavailableError(message=f"Timed out requesting {endpoint}: {e}")
        except httpx.HTTPError as e:
            logger.error("request_failed", endpoint=endpoint, error=str(e))
            raise SourceUnavailableError(
                message=f"Cannot connect to patch server at {self.base_url}: {e}"
            )

        if response.status_code in (401, 403):
            logger.error("authentication_failed", endpoint=endpoint, status=response.status_code)
            raise AuthenticationError(
                message=f"Patch server rejected credentials (HTTP {response.status_code})"
            )
        if response.status_code >= 400:
            logger.error("request_rejected", endpoint=endpoint, status=response.status_code)
            raise SourceUnavailableError(
                message=f"Patch server returned HTTP {response.status_code} for {endpoint}",
                hint=response.text[:200] or None,
            )

        return response
