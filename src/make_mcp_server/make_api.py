"""Thin client for the Make API endpoints the server needs."""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from .config import Config
from .errors import AutomationAPIError
from .models import Scenario, ScenarioInterface, ScenarioRun

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


def extract_error_detail(response: httpx.Response) -> str:
    """Best-effort human readable error detail from a response body."""
    text = response.text
    try:
        body = response.json()
    except ValueError:
        return text
    if isinstance(body, dict):
        for key in ("detail", "message", "error"):
            if body.get(key):
                return str(body[key])
    return text


class MakeClient:
    """Make API client authenticated with a user API token."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "User-Agent": "Make-MCP-Server/0.1.0",
                "Accept": "application/json",
                "Authorization": f"Token {api_key}",
            },
        )

    @classmethod
    def from_config(cls, config: Config) -> "MakeClient":
        return cls(
            config.api_key, config.make_base_url, timeout=config.request_timeout
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body."""
        logger.debug(f"Making {method} request to {url}")
        response = await self._client.request(method, url, **kwargs)
        logger.debug(f"Response status: {response.status_code}")

        if response.status_code >= 400:
            detail = extract_error_detail(response)
            logger.error(
                f"Make API {method} {url} failed with status {response.status_code}: {detail}"
            )
            if response.status_code == 401:
                logger.error("Authentication failed, check MAKE_API_KEY and MAKE_ZONE")
            raise AutomationAPIError(
                f"Make API request failed with status {response.status_code}: {detail}",
                status_code=response.status_code,
                detail=detail,
            )

        try:
            return response.json()
        except ValueError:
            raise AutomationAPIError(
                f"Make API returned a non-JSON body for {method} {url}",
                status_code=response.status_code,
            ) from None

    async def list_scenarios(self, team_id: int) -> List[Scenario]:
        """List every scenario visible to a team, following pagination."""
        scenarios: List[Scenario] = []
        offset = 0
        while True:
            params: Dict[str, Any] = {
                "teamId": team_id,
                "pg[offset]": offset,
                "pg[limit]": PAGE_SIZE,
            }
            data = await self._request("GET", "/scenarios", params=params)
            page = data.get("scenarios") if isinstance(data, dict) else None
            if not isinstance(page, list):
                raise AutomationAPIError("Make API scenario list is missing 'scenarios'")
            try:
                scenarios.extend(Scenario.model_validate(item) for item in page)
            except ValidationError as e:
                raise AutomationAPIError(f"Malformed scenario in Make API response: {e}") from e
            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE
        logger.debug(f"Listed {len(scenarios)} scenarios for team {team_id}")
        return scenarios

    async def get_interface(self, scenario_id: int) -> ScenarioInterface:
        """Fetch the declared inputs of a scenario."""
        data = await self._request("GET", f"/scenarios/{scenario_id}/interface")
        interface = data.get("interface") if isinstance(data, dict) else None
        if interface is None:
            interface = {}
        try:
            return ScenarioInterface.model_validate(
                {k: v for k, v in interface.items() if v is not None}
            )
        except (ValidationError, AttributeError) as e:
            raise AutomationAPIError(
                f"Malformed interface for scenario {scenario_id}: {e}"
            ) from e

    async def run_scenario(
        self, scenario_id: int, data: Optional[Dict[str, Any]] = None
    ) -> ScenarioRun:
        """Trigger an on-demand scenario run."""
        body = {"data": data or {}, "responsive": True}
        result = await self._request("POST", f"/scenarios/{scenario_id}/run", json=body)
        try:
            return ScenarioRun.model_validate(result)
        except ValidationError:
            raise AutomationAPIError(
                f"Make API run response for scenario {scenario_id} has no executionId"
            ) from None

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "MakeClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
