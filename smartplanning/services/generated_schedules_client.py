import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..config import API_BASE_URL, HTTP_TIMEOUT_SECONDS
from ..domain.generated_schedules.schemas import GeneratedScheduleResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Any failure talking to the schedules API"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SessionExpiredError(ApiError):
    """401: the session token is missing, invalid or expired"""


class ForbiddenError(ApiError):
    """403: the reviewer may not act on this schedule"""


class StaleScheduleError(ApiError):
    """404/409: the schedule is gone or no longer a draft"""


class InvalidScheduleDataError(ApiError):
    """422: the server refused the submitted schedule data"""


STATUS_ERRORS = {
    401: SessionExpiredError,
    403: ForbiddenError,
    404: StaleScheduleError,
    409: StaleScheduleError,
    422: InvalidScheduleDataError,
}


class GeneratedSchedulesClient:
    """Async client for the generated schedules API"""

    def __init__(
        self,
        access_token: str,
        base_url: str = API_BASE_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={"Authorization": f"Bearer {self.access_token}"},
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"❌ {method} {path} failed: {e}")
            raise ApiError(f"Network error: {e}") from e

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.warning(f"⚠️ {method} {path} -> HTTP {response.status_code}: {detail}")
            error_class = STATUS_ERRORS.get(response.status_code, ApiError)
            raise error_class(detail, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"❌ {method} {path} returned a non-JSON body: {e}")
            raise ApiError(f"Invalid response from server: {e}", status_code=response.status_code) from e

    async def list_schedules(
        self, status: str = "draft", manager_id: Optional[int] = None
    ) -> list[GeneratedScheduleResponse]:
        """GET /generated-schedules?status=...[&managerId=...]"""
        params: dict[str, Any] = {"status": status}
        if manager_id is not None:
            params["managerId"] = manager_id
        data = await self._request("GET", "/generated-schedules", params=params)
        return _parse_list(data)

    async def update_schedule_data(
        self, schedule_id: int, schedule_data: dict[str, dict]
    ) -> GeneratedScheduleResponse:
        """PATCH /generated-schedules/{id} with the full schedule data"""
        data = await self._request(
            "PATCH", f"/generated-schedules/{schedule_id}", json={"scheduleData": schedule_data}
        )
        return _parse_schedule(data)

    async def validate(self, schedule_id: int, validated_by: int) -> GeneratedScheduleResponse:
        """PATCH /generated-schedules/{id}/validate"""
        data = await self._request(
            "PATCH", f"/generated-schedules/{schedule_id}/validate", json={"validatedBy": validated_by}
        )
        return _parse_schedule(data)

    async def reject(self, schedule_id: int, validated_by: int) -> GeneratedScheduleResponse:
        """PATCH /generated-schedules/{id}/reject"""
        data = await self._request(
            "PATCH", f"/generated-schedules/{schedule_id}/reject", json={"validatedBy": validated_by}
        )
        return _parse_schedule(data)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    detail = body.get("detail") if isinstance(body, dict) else body
    if isinstance(detail, list):
        return "; ".join(str(item.get("msg", item)) if isinstance(item, dict) else str(item) for item in detail)
    return str(detail)


def _parse_schedule(data: Any) -> GeneratedScheduleResponse:
    try:
        return GeneratedScheduleResponse.model_validate(data)
    except ValidationError as e:
        logger.error(f"❌ Unexpected schedule payload: {e}")
        raise ApiError(f"Invalid response from server: {e.error_count()} invalid fields") from e


def _parse_list(data: Any) -> list[GeneratedScheduleResponse]:
    if not isinstance(data, list):
        logger.error(f"❌ Expected a list of schedules, got {type(data).__name__}")
        raise ApiError("Invalid response from server: expected a list of schedules")
    return [_parse_schedule(item) for item in data]
