"""
API client for the Compute Market ledger API.

Ledger rejections come back the same way the ledger itself reports them,
as ``Err(LedgerError)`` results. Transport failures and unexpected HTTP
statuses are raised as httpx exceptions.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from compute_market.ledger import Err, LedgerError, Ok, Result
from compute_market.ledger_api.schemas import ConsumerOut, JobOut, ProviderOut

logger = logging.getLogger(__name__)

_CODES = {error.code: error for error in LedgerError}


class LedgerClient:
    """Client for one caller of the ledger API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.transport = transport
        self.timeout = timeout

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url, transport=self.transport, timeout=self.timeout
        ) as client:
            return await client.request(
                method,
                endpoint,
                json=data,
                params=params,
                headers=headers or self.headers,
            )

    async def _operation(self, method: str, endpoint: str, data: Optional[Dict] = None) -> Result[Any]:
        """Call a ledger operation and decode its outcome into a result."""
        response = await self._request(method, endpoint, data=data)
        if response.is_success:
            return Ok(response.json())

        error = _ledger_error(response)
        if error is None:
            logger.error("HTTP error: %s - %s", response.status_code, response.text)
            response.raise_for_status()
        return Err(error)

    async def _read(self, endpoint: str) -> Optional[Dict]:
        response = await self._request("GET", endpoint)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    # Auth
    async def issue_token(self, identity: str, api_key: str) -> str:
        """Mint a caller token for ``identity`` and use it for later calls."""
        response = await self._request(
            "POST",
            "/auth/token",
            data={"identity": identity},
            headers={"Content-Type": "application/json", "X-API-Key": api_key},
        )
        response.raise_for_status()
        self.token = response.json()["access_token"]
        return self.token

    # Provider operations
    async def register_provider(self, resources: int, price_per_unit: int) -> Result[None]:
        result = await self._operation(
            "POST", "/providers/", {"resources": resources, "price_per_unit": price_per_unit}
        )
        return Ok(None) if result.is_ok else result

    async def update_provider(self, resources: int, price_per_unit: int) -> Result[None]:
        result = await self._operation(
            "PUT", "/providers/me", {"resources": resources, "price_per_unit": price_per_unit}
        )
        return Ok(None) if result.is_ok else result

    async def withdraw_earnings(self) -> Result[int]:
        result = await self._operation("POST", "/providers/me/withdraw")
        return Ok(result.value["amount"]) if result.is_ok else result

    async def get_provider(self, identity: str) -> Optional[ProviderOut]:
        data = await self._read(f"/providers/{identity}")
        return ProviderOut.model_validate(data) if data is not None else None

    # Consumer operations
    async def add_funds(self, amount: int) -> Result[None]:
        result = await self._operation("POST", "/consumers/me/funds", {"amount": amount})
        return Ok(None) if result.is_ok else result

    async def get_consumer(self, identity: str) -> Optional[ConsumerOut]:
        data = await self._read(f"/consumers/{identity}")
        return ConsumerOut.model_validate(data) if data is not None else None

    # Job operations
    async def request_compute(self, provider: str, resources: int) -> Result[int]:
        result = await self._operation(
            "POST", "/jobs/", {"provider": provider, "resources": resources}
        )
        return Ok(result.value["job_id"]) if result.is_ok else result

    async def complete_job(self, job_id: int) -> Result[None]:
        result = await self._operation("POST", f"/jobs/{job_id}/complete")
        return Ok(None) if result.is_ok else result

    async def get_job(self, job_id: int) -> Optional[JobOut]:
        data = await self._read(f"/jobs/{job_id}")
        return JobOut.model_validate(data) if data is not None else None

    async def list_jobs(
        self,
        provider: Optional[str] = None,
        consumer: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[JobOut]:
        params = {
            key: value
            for key, value in (("provider", provider), ("consumer", consumer), ("status", status))
            if value is not None
        }
        response = await self._request("GET", "/jobs/", params=params)
        response.raise_for_status()
        return [JobOut.model_validate(j) for j in response.json()]

    # Health check
    async def health_check(self) -> bool:
        """Check if the API is healthy."""
        try:
            response = await self._request("GET", "/health")
        except httpx.RequestError as e:
            logger.warning("Health check failed: %s", e)
            return False
        return response.is_success and response.json().get("status") == "healthy"


def _ledger_error(response: httpx.Response) -> Optional[LedgerError]:
    """Decode a ledger rejection body, or None for any other error response."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    return _CODES.get(body.get("code"))
