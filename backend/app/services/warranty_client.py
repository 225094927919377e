"""HTTP client for the external warranty registration service."""

import logging
from typing import Optional

import httpx

from app.core.config import get_settings

logger = logging.getLogger(__name__)

DEVICES_PATH = "/api/devices"
REGISTER_PATH = "/warranty/register"


class WarrantyServiceError(Exception):
    """The warranty service could not be reached or answered with an error."""


class WarrantyServiceNotConfigured(WarrantyServiceError):
    pass


class WarrantyServiceClient:
    """Thin wrapper over ``httpx.Client``. No retries, no idempotency key."""

    def __init__(
        self,
        base_url: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._base_url = (base_url or "").rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._base_url)

    def _client(self) -> httpx.Client:
        if not self.configured:
            raise WarrantyServiceNotConfigured("Warranty service URL not configured")
        return httpx.Client(
            base_url=self._base_url,
            timeout=self._timeout,
            headers={"Content-Type": "application/json"},
            transport=self._transport,
        )

    def _request(self, method: str, path: str, **kwargs):
        with self._client() as client:
            try:
                response = client.request(method, path, **kwargs)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(
                    "warranty service returned %d for %s %s: %s",
                    e.response.status_code,
                    method,
                    path,
                    e.response.text[:200] if e.response.text else "no body",
                )
                raise WarrantyServiceError(f"warranty service returned {e.response.status_code}") from e
            except httpx.HTTPError as e:
                logger.error("warranty service %s %s failed (%s): %s", method, path, type(e).__name__, e)
                raise WarrantyServiceError(str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error("warranty service sent a non-JSON body for %s %s", method, path)
            raise WarrantyServiceError("invalid response body") from e

    def list_devices(self) -> dict:
        data = self._request("GET", DEVICES_PATH)
        if isinstance(data, list):
            data = {"data": data}
        devices = data.get("data") or []
        return {"devices": devices, "count": data.get("count") or len(devices)}

    def register_device(self, payload: dict) -> dict:
        return self._request("POST", REGISTER_PATH, json=payload)


def get_warranty_client() -> WarrantyServiceClient:
    s = get_settings()
    return WarrantyServiceClient(s.warranty_service_url, timeout=s.warranty_service_timeout)
