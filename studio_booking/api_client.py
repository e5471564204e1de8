"""
HTTP client for the Booking API.

Used by the website and booking widget backends. Admin calls authenticate
with a bearer token taken from, in order: the ``token`` argument, the
BOOKING_API_TOKEN environment variable, or a JSON credentials file
(``{"token": "..."}``) at BOOKING_API_CREDENTIALS.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

import httpx

from .errors import ERRORS_BY_KIND, BookingError

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_PATH = Path.home() / ".studio_booking" / "credentials.json"


class BookingAPIError(Exception):
    """HTTP failure that does not map to a booking error kind"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


def load_token(
    token: Optional[str] = None, credentials_path: Optional[os.PathLike] = None
) -> Optional[str]:
    """Resolve the bearer token; None when no source provides one"""
    if token:
        return token

    env_token = os.getenv("BOOKING_API_TOKEN")
    if env_token:
        return env_token

    path = Path(
        credentials_path or os.getenv("BOOKING_API_CREDENTIALS") or DEFAULT_CREDENTIALS_PATH
    ).expanduser()
    if not path.is_file():
        return None

    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError) as e:
        raise BookingAPIError(f"Could not read credentials file {path}: {e}") from e

    if not isinstance(data, dict) or not data.get("token"):
        raise BookingAPIError(f"Credentials file {path} has no 'token'")
    return data["token"]


class BookingAPIClient:
    """Synchronous client for the Booking API"""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        credentials_path: Optional[os.PathLike] = None,
        timeout: float = 10,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.token = load_token(token, credentials_path)
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BookingAPIClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"❌ Booking API {method} {path} failed: {e}")
            raise BookingAPIError(f"{method} {path} failed: {e}") from e

        if response.is_success:
            return response.json()

        raise self._error_from_response(method, path, response)

    @staticmethod
    def _error_from_response(method: str, path: str, response: httpx.Response) -> Exception:
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("kind") in ERRORS_BY_KIND:
            error_cls = ERRORS_BY_KIND[body["kind"]]
            logger.warning(f"⚠️ Booking API {method} {path}: {body['kind']} - {body.get('message')}")
            return error_cls(body.get("message", ""), body.get("fields"))

        detail = body.get("detail") if isinstance(body, dict) else response.text
        logger.error(f"❌ Booking API {method} {path} returned {response.status_code}: {detail}")
        return BookingAPIError(
            f"{method} {path} returned {response.status_code}: {detail}",
            status_code=response.status_code,
        )

    # ------------------------------------------------------------------

    def list_bookings(
        self,
        status: Optional[str] = None,
        service_id: Optional[int] = None,
        client_id: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[dict]:
        params = {
            "status": status,
            "serviceId": service_id,
            "clientId": client_id,
            "startDate": start_date,
            "endDate": end_date,
        }
        return self._request(
            "GET", "/bookings", params={k: v for k, v in params.items() if v is not None}
        )

    def create_booking(
        self,
        service_id: int,
        date: str,
        start_time: str,
        client_id: Optional[int] = None,
        client: Optional[dict] = None,
        notes: Optional[str] = None,
    ) -> dict:
        """
        Submit a booking request.

        Raises:
            ValidationError, SlotUnavailableError, ...: as reported by the API
            BookingAPIError: transport failure or unexpected response
        """
        payload = {"serviceId": service_id, "date": date, "startTime": start_time}
        if client_id is not None:
            payload["clientId"] = client_id
        if client is not None:
            payload["client"] = client
        if notes:
            payload["notes"] = notes
        booking = self._request("POST", "/bookings", json=payload)
        logger.info(f"📅 Booking {booking['id']} submitted via API ({booking['status']})")
        return booking

    def list_clients(self, search: Optional[str] = None) -> list[dict]:
        params = {"search": search} if search else None
        return self._request("GET", "/clients", params=params)

    def create_client(
        self, name: str, email: str, phone: str, notes: Optional[str] = None
    ) -> dict:
        payload = {"name": name, "email": email, "phone": phone}
        if notes:
            payload["notes"] = notes
        return self._request("POST", "/clients", json=payload)

    def get_availability(self, service_id: int, date: str) -> dict:
        return self._request(
            "GET", "/availability", params={"serviceId": service_id, "date": date}
        )


__all__ = ["BookingAPIClient", "BookingAPIError", "BookingError", "load_token"]
