from __future__ import annotations

import os

from pydantic import BaseModel, Field


class TelemetryConfig(BaseModel):
    """Telemetry settings for the warranty bridge server and vendor client."""

    service_name: str = Field(
        default="warranty-bridge",
        description="OTel service name; used as the primary identifier in traces.",
    )
    enabled: bool = Field(
        default=True,
        description="Master switch for OTel instrumentation.",
    )
    otlp_endpoint: str | None = Field(
        default=None,
        description=(
            "OTLP collector endpoint (e.g. http://localhost:4317). "
            "Falls back to OTEL_EXPORTER_OTLP_ENDPOINT env var; no endpoint means no-op."
        ),
    )
    otlp_protocol: str = Field(
        default="grpc",
        description="OTLP protocol: 'grpc' or 'http/protobuf'.",
    )
    otlp_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra headers for the OTLP exporters (e.g. auth tokens).",
    )
    export_metrics: bool = Field(
        default=True,
        description="Also export vendor client metrics over OTLP.",
    )
    metrics_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Export interval for the periodic metric reader.",
    )
    capture_tool_io: bool = Field(
        default=False,
        description="Record tool arguments and results on spans. Falls back to WARRANTY_OTEL_CAPTURE_IO.",
    )
    log_level: str = Field(
        default="INFO",
        description="Python logging level. Falls back to WARRANTY_LOG_LEVEL env var.",
    )
    batch: bool = Field(
        default=True,
        description="Use BatchSpanProcessor (True) or SimpleSpanProcessor (False).",
    )
    instrument_httpx: bool = Field(
        default=True,
        description="Auto-instrument httpx.AsyncClient calls to the vendor API.",
    )

    def resolve(self) -> TelemetryConfig:
        """Return a copy with env-var fallbacks applied."""
        return self.model_copy(
            update={
                "enabled": _env_bool("WARRANTY_OTEL_ENABLED", self.enabled),
                "service_name": os.getenv("WARRANTY_OTEL_SERVICE_NAME", self.service_name),
                "otlp_endpoint": self.otlp_endpoint
                or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"),
                "otlp_protocol": os.getenv("OTEL_EXPORTER_OTLP_PROTOCOL", self.otlp_protocol),
                "export_metrics": _env_bool("WARRANTY_OTEL_METRICS", self.export_metrics),
                "capture_tool_io": _env_bool("WARRANTY_OTEL_CAPTURE_IO", self.capture_tool_io),
                "log_level": os.getenv("WARRANTY_LOG_LEVEL", self.log_level),
            }
        )


def _env_bool(key: str, default: bool) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")
