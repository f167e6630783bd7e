"""Results API client and output normalization.

Make runs finish asynchronously; the scenario pushes its output to a
separate Results API which serves it by execution ID.
"""

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .config import Config
from .errors import InternalError
from .models import ResultPayload

logger = logging.getLogger(__name__)

NO_OUTPUT_PLACEHOLDER = "(No output data received from results API)"


def normalize_output(output: Any) -> str:
    """Render a result ``output`` value as tool text.

    Missing output becomes a placeholder, strings pass through verbatim and
    any other JSON value is serialized with two-space indentation.
    """
    if output is None:
        return NO_OUTPUT_PLACEHOLDER
    if isinstance(output, str):
        return output
    return json.dumps(output, indent=2, ensure_ascii=False)


def _error_detail(response: httpx.Response) -> str:
    detail = response.text
    try:
        body = response.json()
    except ValueError:
        return detail
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return detail


class ResultsClient:
    """Looks up execution results by execution ID. Single attempt, no polling."""

    def __init__(
        self,
        base_url: str,
        secret_key: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._secret_key = secret_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(cls, config: Config) -> "ResultsClient":
        return cls(
            config.results_api_url,
            config.results_api_secret_key,
            timeout=config.results_timeout,
        )

    def retrieve_url(self, execution_id: str) -> str:
        return f"{self.base_url}/retrieve/{execution_id}"

    async def retrieve(self, execution_id: str) -> ResultPayload:
        """Fetch the stored result of an execution.

        Raises:
            InternalError: network failure or timeout, a non-success status
                (404 reported as not found or expired) or an unreadable body.
        """
        url = self.retrieve_url(execution_id)
        logger.info(f"[{execution_id}] Retrieving results from: {url}")
        try:
            response = await self._client.get(
                url,
                headers={
                    "X-API-Key": self._secret_key,
                    "Accept": "application/json",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"[{execution_id}] Results API request failed: {e!r}")
            raise InternalError(
                f"Failed to retrieve results for execution ID {execution_id}: {e!r}"
            ) from e

        logger.info(
            f"[{execution_id}] Results API responded with status: {response.status_code}"
        )

        if not response.is_success:
            detail = _error_detail(response)
            if response.status_code == 404:
                logger.warning(f"[{execution_id}] Result retrieval failed: 404 Not Found.")
                raise InternalError(
                    f"Failed to retrieve results for execution ID {execution_id}: "
                    f"Result not found or expired (404). Detail: {detail}"
                )
            logger.error(
                f"[{execution_id}] Result retrieval failed: Status {response.status_code}. "
                f"Detail: {detail}"
            )
            raise InternalError(
                f"Failed to retrieve results for execution ID {execution_id}. "
                f"Status: {response.status_code}. Detail: {detail}"
            )

        try:
            payload = ResultPayload.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise InternalError(
                f"Results API returned an unreadable body for execution ID {execution_id}: {e}"
            ) from e

        if payload.error:
            logger.warning(f"[{execution_id}] Results API reported an error: {payload.error}")
        return payload

    async def aclose(self) -> None:
        await self._client.aclose()
