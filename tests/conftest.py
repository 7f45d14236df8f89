from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from warranty_bridge.vendor.config import VendorConfig

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
BASE_URL = "https://vendor.test/api/v5"
TOKEN_URL = "https://vendor.test/auth/oauth/v2/token"


class FakeClock:
    """Callable clock whose time only moves when a test advances it."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def iso(days: float) -> str:
    return (NOW + timedelta(days=days)).isoformat()


def asset_payload(service_tag: str = "ABC1234", entitlements: list[dict] | None = None) -> dict:
    return {
        "serviceTag": service_tag,
        "productLineDescription": "Latitude 7440",
        "systemDescription": "Latitude 7440 Laptop",
        "productFamily": "Latitude",
        "shipDate": "2024-02-10T06:00:00Z",
        "countryCode": "US",
        "duplicated": False,
        "invalid": False,
        "entitlements": entitlements
        if entitlements is not None
        else [
            {
                "itemNumber": "997-6789",
                "startDate": "2024-02-10T06:00:00Z",
                "endDate": "2027-02-10T05:59:59Z",
                "entitlementType": "INITIAL",
                "serviceLevelCode": "PROSUPIT",
                "serviceLevelDescription": "ProSupport for IT",
                "serviceLevelGroup": 5,
            }
        ],
    }


class VendorStub:
    """Scripted stand-in for the vendor's token and entitlement endpoints."""

    def __init__(self) -> None:
        self.token_calls = 0
        self.resource_calls = 0
        self.token_statuses: list[int] = []
        self.resource_responses: list[httpx.Response] = []
        self.requests: list[httpx.Request] = []
        self.on_token: Callable[[], Any] | None = None

    def queue(self, status: int, body: Any = None, headers: dict[str, str] | None = None) -> None:
        content = body if isinstance(body, str) else json.dumps(body)
        self.resource_responses.append(
            httpx.Response(status, content=content, headers=headers)
        )

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) == TOKEN_URL:
            self.token_calls += 1
            if self.on_token is not None:
                await self.on_token()
            status = self.token_statuses.pop(0) if self.token_statuses else 200
            if status != 200:
                return httpx.Response(status, text="invalid_client")
            return httpx.Response(
                200,
                json={
                    "access_token": f"token-{self.token_calls}",
                    "token_type": "Bearer",
                    "expires_in": 3600,
                },
            )

        self.resource_calls += 1
        if self.resource_responses:
            return self.resource_responses.pop(0)
        service_tag = request.url.params.get("servicetags", "")
        return httpx.Response(200, json=[asset_payload(service_tag)])

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def vendor() -> VendorStub:
    return VendorStub()


@pytest.fixture
def config() -> VendorConfig:
    return VendorConfig(
        client_id="client-id",
        client_secret="client-secret",
        base_url=BASE_URL,
        token_url=TOKEN_URL,
        max_requests_per_window=50,
    )
