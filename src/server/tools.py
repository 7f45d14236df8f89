from __future__ import annotations

import json
import logging

from fastmcp import Context, FastMCP

from warranty_bridge.observability.tracing import traced_tool
from warranty_bridge.vendor.bulk import summarize
from warranty_bridge.vendor.client import VendorClient
from warranty_bridge.vendor.describe import asset_summary, describe_warranty
from warranty_bridge.vendor.errors import VendorAPIError
from warranty_bridge.vendor.models import BulkProgress

logger = logging.getLogger(__name__)


def _log_progress(progress: BulkProgress) -> None:
    failed = sum(1 for r in progress.latest_batch_results if not r.success)
    logger.info(
        "Bulk lookup %d/%d (%d%%), %d failed in last batch",
        progress.processed_count,
        progress.total,
        progress.percentage,
        failed,
    )


def register_tools(mcp: FastMCP) -> None:

    @mcp.tool(tags={"warranty", "lookup"})
    @traced_tool()
    async def get_asset_info(
        service_tag: str,
        ctx: Context = Context,  # type: ignore[assignment]
    ) -> str:
        """Look up one service tag and describe its warranty coverage."""
        client: VendorClient = ctx.lifespan_context["vendor_client"]

        try:
            record = await client.get_asset_info(service_tag)
        except VendorAPIError as exc:
            return f"Lookup failed ({exc.kind}): {exc}"

        return describe_warranty(record)

    @mcp.tool(tags={"warranty", "bulk"})
    @traced_tool()
    async def process_many(
        service_tags: list[str],
        report_invalid: bool = False,
        ctx: Context = Context,  # type: ignore[assignment]
    ) -> str:
        """Look up many service tags in paced batches of five; returns JSON rows."""
        client: VendorClient = ctx.lifespan_context["vendor_client"]

        results = await client.process_many(
            service_tags, _log_progress, report_invalid=report_invalid
        )
        summary = summarize(results)
        rows = [
            {
                "service_tag": r.service_tag,
                "success": r.success,
                "error": r.error,
                "data": asset_summary(r.data) if r.data is not None else None,
            }
            for r in results
        ]
        return json.dumps(
            {
                "total": summary.total,
                "successful": summary.successful,
                "errors": summary.errors,
                "results": rows,
            },
            indent=2,
        )

    @mcp.tool(tags={"warranty", "admin"})
    @traced_tool()
    async def test_connection(
        ctx: Context = Context,  # type: ignore[assignment]
    ) -> str:
        """Authenticate against the vendor API without looking anything up."""
        client: VendorClient = ctx.lifespan_context["vendor_client"]
        check = await client.test_connection()
        return check.message

    @mcp.tool(tags={"warranty", "admin"})
    @traced_tool()
    async def get_status(
        ctx: Context = Context,  # type: ignore[assignment]
    ) -> str:
        """Token and client-side rate-limit state; makes no vendor calls."""
        client: VendorClient = ctx.lifespan_context["vendor_client"]
        status = client.get_status()
        expiry = status.token_expiry.isoformat() if status.token_expiry else "n/a"
        if status.max_requests_per_window is None:
            limit = "(not loaded)"
        else:
            limit = f"{status.rate_limit_remaining}/{status.max_requests_per_window}"
        return (
            f"Authenticated: {status.authenticated}\n"
            f"Token expiry: {expiry}\n"
            f"Rate limit remaining: {limit}"
        )
