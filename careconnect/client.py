# careconnect/client.py
"""Cliente HTTP para la API del marketplace (backend Express)."""
from typing import Any, Dict, Optional
from urllib.parse import quote
import logging

import httpx

from .config import get_settings

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Fallo al hablar con la API del marketplace."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamNotFoundError(UpstreamError):
    """El recurso no existe en el marketplace."""


class MarketplaceClient:
    """
    Envuelve un httpx.AsyncClient con el token del usuario.
    `http` se puede inyectar (tests con httpx.MockTransport).
    """

    def __init__(
        self,
        token: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.token = token
        self.http = http or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=httpx.Timeout(settings.api_timeout_seconds),
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "MarketplaceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            response = await self.http.request(
                method, path, params=params, json=json, headers=self._headers()
            )
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"Timeout en {method} {path}") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Error de conexión en {method} {path}: {exc}") from exc

        if response.status_code == 404:
            raise UpstreamNotFoundError(f"{method} {path} no encontrado", 404)
        if response.status_code >= 400:
            logger.warning("Marketplace %s %s -> %s: %s", method, path, response.status_code, response.text)
            raise UpstreamError(f"{method} {path} falló", response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f"Respuesta no JSON en {method} {path}", response.status_code) from exc

    # ---------- Reservas ----------

    async def get_my_bookings(self, **filters: Any) -> Any:
        return await self.request("GET", "/bookings/my", params=filters or None)

    async def get_booking(self, booking_id: str) -> Dict[str, Any]:
        payload = await self.request("GET", f"/bookings/{quote(booking_id, safe='')}")
        if isinstance(payload, dict):
            inner = payload.get("booking") or payload.get("data")
            if isinstance(inner, dict):
                return inner
            return payload
        return {}

    async def update_booking_status(self, booking_id: str, status: str, feedback: Optional[str] = None) -> Any:
        return await self.request(
            "PATCH",
            f"/bookings/{quote(booking_id, safe='')}/status",
            json={"status": status, "feedback": feedback},
        )

    async def cancel_booking(self, booking_id: str, reason: str = "") -> Any:
        return await self.request(
            "DELETE", f"/bookings/{quote(booking_id, safe='')}", json={"reason": reason}
        )

    # ---------- Cuidadores ----------

    async def get_caregivers(self, **filters: Any) -> Any:
        return await self.request("GET", "/caregivers", params=filters or {"role": "caregiver"})

    async def get_caregiver(self, caregiver_id: str) -> Any:
        return await self.request("GET", f"/caregivers/{quote(caregiver_id, safe='')}")

    # ---------- Panel del padre ----------

    async def get_profile(self) -> Any:
        return await self.request("GET", "/auth/profile")

    async def get_my_jobs(self, page: int = 1, limit: int = 10) -> Any:
        return await self.request("GET", "/jobs/my", params={"page": page, "limit": limit})

    async def get_my_children(self) -> Any:
        return await self.request("GET", "/children")
