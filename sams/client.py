# sams/client.py
"""Async client for the S-AMS HTTP API.

Identical GET requests issued while one is still in flight share its
response instead of hitting the server again. Nothing else is cached, and
there is no timeout or retry: a failed call raises once.
"""

import asyncio
import json
import logging
import os
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from . import config
from .errors import ValidationError

logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"


class ApiError(Exception):
    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TokenStore:
    """Bearer token persisted under a fixed key in a small JSON file.

    ``path=None`` keeps the token in memory only.
    """

    def __init__(self, path: Optional[str] = config.TOKEN_STORE_PATH):
        self.path = path
        self._memory: Dict[str, str] = {}

    def _read(self) -> dict:
        if self.path is None:
            return self._memory
        if not os.path.exists(self.path):
            return {}
        with open(self.path) as fh:
            return json.load(fh)

    def _write(self, data: dict):
        if self.path is None:
            self._memory = data
            return
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        with open(self.path, "w") as fh:
            json.dump(data, fh)

    def get(self) -> Optional[str]:
        return self._read().get(TOKEN_KEY)

    def set(self, token: str):
        data = self._read()
        data[TOKEN_KEY] = token
        self._write(data)

    def clear(self):
        data = self._read()
        data.pop(TOKEN_KEY, None)
        self._write(data)


class RequestCoalescer:
    """Map of request key to the in-flight task producing its result."""

    def __init__(self):
        self._in_flight: Dict[str, asyncio.Future] = {}

    @staticmethod
    def key(method: str, endpoint: str) -> str:
        return f"{method.upper()}:{endpoint}"

    def __contains__(self, key: str) -> bool:
        return key in self._in_flight

    def __len__(self) -> int:
        return len(self._in_flight)

    async def run(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._in_flight[key] = task

            def _forget(done, key=key):
                if self._in_flight.get(key) is done:
                    del self._in_flight[key]

            task.add_done_callback(_forget)
        else:
            logger.debug("Joining in-flight request %s", key)
        # a cancelled waiter must not cancel the request for the others
        return await asyncio.shield(task)


class ApiClient:
    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.tokens = token_store if token_store is not None else TokenStore()
        self.coalescer = RequestCoalescer()
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    # ---- transport ----

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        token = self.tokens.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(self, method: str, endpoint: str, payload: Optional[dict] = None, params: Optional[dict] = None):
        response = await self._http.request(method, endpoint, json=payload, params=params, headers=self._headers())
        return self._unwrap(response)

    @staticmethod
    def _unwrap(response: httpx.Response):
        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error or (isinstance(body, dict) and body.get("success") is False):
            message = ""
            if isinstance(body, dict):
                message = body.get("message") or body.get("detail") or ""
            raise ApiError(str(message or response.reason_phrase), response.status_code)

        if isinstance(body, dict) and "success" in body:
            return body.get("data")
        return body

    async def request(self, method: str, endpoint: str, payload: Optional[dict] = None, params: Optional[dict] = None):
        method = method.upper()
        if method != "GET":
            return await self._send(method, endpoint, payload, params)
        key = self.coalescer.key(method, endpoint)
        if params:
            key += "?" + str(httpx.QueryParams(params))
        return await self.coalescer.run(key, lambda: self._send(method, endpoint, None, params))

    # ---- auth ----

    async def login(self, email: str, password: str) -> str:
        response = await self._http.post("/auth/login", data={"username": email, "password": password})
        token = self._unwrap(response)["access_token"]
        self.tokens.set(token)
        return token

    def logout(self):
        self.tokens.clear()

    # ---- appointments ----

    async def list_appointments(self):
        return await self.request("GET", "/appointments")

    async def list_all_appointments(self):
        return await self.request("GET", "/appointments/all")

    async def get_appointment(self, appointment_id: int):
        return await self.request("GET", f"/appointments/{appointment_id}")

    async def create_appointment(self, payload: dict):
        return await self.request("POST", "/appointments", payload)

    async def update_appointment(self, appointment_id: int, payload: dict):
        return await self.request("PUT", f"/appointments/{appointment_id}", payload)

    async def update_appointment_status(self, appointment_id: int, status: str, staff_id: Optional[int] = None):
        payload = {"status": status}
        if staff_id:
            payload["staffId"] = staff_id
        return await self.request("PUT", f"/appointments/{appointment_id}/status", payload)

    async def delete_appointment(self, appointment_id: int):
        return await self.request("DELETE", f"/appointments/{appointment_id}")

    async def assign_staff(self, appointment_id: int, staff_id: Optional[int]):
        """Confirm + assign, then reload the caller's appointment listing."""
        if not staff_id:
            raise ValidationError("Please select a staff member")
        appointment = await self.update_appointment_status(appointment_id, "confirmed", staff_id)
        appointments = await self.list_appointments()
        return appointment, appointments

    # ---- staff ----

    async def list_company_staff(self, company_id: int):
        return await self.request("GET", f"/staff/company/{company_id}")

    async def list_available_users(self, include_staffed: bool = False):
        params = {"includeStaffed": "true"} if include_staffed else None
        return await self.request("GET", "/staff/available-users", params=params)

    async def create_staff(self, payload: dict):
        return await self.request("POST", "/staff", payload)

    async def update_staff(self, staff_id: int, payload: dict):
        return await self.request("PUT", f"/staff/{staff_id}", payload)

    async def delete_staff(self, staff_id: int):
        return await self.request("DELETE", f"/staff/{staff_id}")
