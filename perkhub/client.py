from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from .errors import InternalError, error_for_status


@dataclass
class PerkPage:
    perks: list[dict[str, Any]]
    count: int
    total: int
    summary: str
    filters: dict[str, str] = field(default_factory=dict)


class PerksClient:
    """Async client for the PerkHub HTTP API.

    ``token`` is attached as ``Authorization: Bearer <token>`` on every
    request once set (``register``/``login`` set it automatically).
    Error responses are raised as the matching ``perkhub.errors`` type;
    transport failures become ``InternalError``.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token: str | None = None,
        timeout_s: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_s),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "PerksClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        try:
            resp = await self._client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            raise InternalError(f"Could not reach the perks service: {exc}") from exc

        if resp.status_code >= 400:
            message = None
            try:
                body = resp.json()
                if isinstance(body, dict):
                    message = body.get("message") or body.get("detail")
            except ValueError:
                pass
            raise error_for_status(resp.status_code, message or resp.reason_phrase)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise InternalError("The perks service returned an invalid response") from exc
        if not isinstance(payload, dict):
            raise InternalError("The perks service returned an invalid response")
        return payload

    # ---------------- Auth ----------------

    async def register(self, *, name: str, email: str, password: str) -> dict[str, Any]:
        data = await self._request(
            "POST", "/auth/register", json={"name": name, "email": email, "password": password}
        )
        self.token = data["token"]
        return data

    async def login(self, *, email: str, password: str) -> dict[str, Any]:
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    async def me(self) -> dict[str, Any]:
        return (await self._request("GET", "/auth/me"))["user"]

    async def delete_me(self) -> None:
        await self._request("DELETE", "/auth/me")

    # ---------------- Perks ----------------

    async def list_perks(
        self,
        *,
        title: str | None = None,
        merchant: str | None = None,
        category: str | None = None,
    ) -> PerkPage:
        params = {
            k: v.strip()
            for k, v in {"title": title, "merchant": merchant, "category": category}.items()
            if v and v.strip()
        }
        data = await self._request("GET", "/perks", params=params)
        try:
            return PerkPage(
                perks=list(data["perks"]),
                count=int(data["count"]),
                total=int(data["total"]),
                summary=str(data["summary"]),
                filters=params,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InternalError("The perks service returned an invalid response") from exc

    async def list_merchants(self) -> list[str]:
        return list((await self._request("GET", "/perks/merchants"))["merchants"])

    async def my_perks(self) -> list[dict[str, Any]]:
        return list((await self._request("GET", "/perks/mine"))["perks"])

    async def get_perk(self, perk_id: int) -> dict[str, Any]:
        return (await self._request("GET", f"/perks/{perk_id}"))["perk"]

    async def create_perk(self, payload: dict[str, Any]) -> dict[str, Any]:
        return (await self._request("POST", "/perks", json=payload))["perk"]

    async def update_perk(self, perk_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        return (await self._request("PUT", f"/perks/{perk_id}", json=changes))["perk"]

    async def delete_perk(self, perk_id: int) -> None:
        await self._request("DELETE", f"/perks/{perk_id}")

