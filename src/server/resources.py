from __future__ import annotations

from datetime import datetime, timezone

from fastmcp import Context, FastMCP

from warranty_bridge.observability.tracing import traced_resource
from warranty_bridge.vendor.client import VendorClient

SERVICE_NAME = "Warranty Bridge"
SERVICE_VERSION = "1.0.0"


def _or_not_loaded(value: object) -> str:
    return "(not loaded)" if value is None else str(value)


def register_resources(mcp: FastMCP) -> None:

    @mcp.resource("vendor://status")
    @traced_resource(uri="vendor://status")
    async def vendor_status(ctx: Context = Context) -> str:  # type: ignore[assignment]
        """Token, rate-limit and endpoint state of the vendor client."""
        client: VendorClient = ctx.lifespan_context["vendor_client"]
        status = client.get_status()

        return (
            f"Authenticated: {status.authenticated}\n"
            f"Token expiry: {status.token_expiry.isoformat() if status.token_expiry else 'n/a'}\n"
            f"Rate limit remaining: {_or_not_loaded(status.rate_limit_remaining)}\n"
            f"Max requests per window: {_or_not_loaded(status.max_requests_per_window)}\n"
            f"Base URL: {status.base_url or '(not loaded)'}\n"
            f"Debug mode: {status.debug_mode}"
        )

    @mcp.resource("vendor://health")
    @traced_resource(uri="vendor://health")
    async def vendor_health() -> str:
        """Liveness of the bridge itself; does not call the vendor."""
        return (
            "status: healthy\n"
            f"timestamp: {datetime.now(timezone.utc).isoformat()}\n"
            f"version: {SERVICE_VERSION}\n"
            f"service: {SERVICE_NAME}"
        )
