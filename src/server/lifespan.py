from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastmcp import FastMCP

from warranty_bridge.observability.metrics import create_vendor_metrics
from warranty_bridge.vendor.client import VendorClient
from warranty_bridge.vendor.config import EnvConfigProvider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(server: FastMCP):
    provider = EnvConfigProvider()
    # Only transport settings are needed up front; credentials are checked
    # lazily so the server still starts (and reports why) when they are missing.
    transport = provider.load()

    async with httpx.AsyncClient(
        timeout=httpx.Timeout(transport.timeout_seconds),
        headers={"User-Agent": transport.user_agent},
    ) as http_client:
        client = VendorClient(
            provider,
            http_client=http_client,
            metrics=create_vendor_metrics(),
        )
        check = await client.test_connection()
        if check.success:
            logger.info("Vendor API reachable at start-up")
        else:
            # Lookups will keep surfacing the error; the server stays up for get_status.
            logger.warning("Vendor API not ready: %s", check.message)

        yield {"vendor_client": client}
