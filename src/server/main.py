from __future__ import annotations

import os

from dotenv import load_dotenv
from fastmcp import FastMCP

from server.lifespan import app_lifespan
from server.resources import register_resources
from server.tools import register_tools
from warranty_bridge.observability.config import TelemetryConfig
from warranty_bridge.observability.logging import configure_logging
from warranty_bridge.observability.setup import configure_telemetry

load_dotenv()

telemetry = TelemetryConfig().resolve()
configure_logging(telemetry.log_level)

mcp = FastMCP(
    name="Warranty Bridge",
    lifespan=app_lifespan,
)

register_tools(mcp)
register_resources(mcp)


def main() -> None:
    configure_telemetry(telemetry)
    port = int(os.environ.get("WARRANTY_SERVER_PORT", "8001"))
    mcp.run(transport="streamable-http", port=port)


if __name__ == "__main__":
    main()
