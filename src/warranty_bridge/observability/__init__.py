from __future__ import annotations

from warranty_bridge.observability.config import TelemetryConfig
from warranty_bridge.observability.setup import TelemetryProviders, configure_telemetry
from warranty_bridge.observability.tracing import (
    get_tracer,
    traced_tool,
    traced_resource,
    traced_vendor_call,
    traced_token_exchange,
)
from warranty_bridge.observability.logging import configure_logging, TraceContextFilter
from warranty_bridge.observability.metrics import create_vendor_metrics, VendorMetrics

__all__ = [
    "TelemetryConfig",
    "TelemetryProviders",
    "configure_telemetry",
    "configure_logging",
    "TraceContextFilter",
    "get_tracer",
    "traced_tool",
    "traced_resource",
    "traced_vendor_call",
    "traced_token_exchange",
    "create_vendor_metrics",
    "VendorMetrics",
]
