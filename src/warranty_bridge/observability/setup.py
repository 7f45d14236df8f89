from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from opentelemetry import metrics, trace

from warranty_bridge.observability.config import TelemetryConfig

if TYPE_CHECKING:
    from opentelemetry.sdk.metrics import MeterProvider
    from opentelemetry.sdk.trace import TracerProvider

logger = logging.getLogger(__name__)


@dataclass
class TelemetryProviders:
    tracer_provider: TracerProvider
    meter_provider: MeterProvider | None = None

    def shutdown(self) -> None:
        self.tracer_provider.shutdown()
        if self.meter_provider is not None:
            self.meter_provider.shutdown()


def configure_telemetry(
    config: TelemetryConfig | None = None,
) -> TelemetryProviders | None:
    """Set up OTLP tracing (and optionally metrics) for the warranty bridge.

    Returns the installed providers, or ``None`` when telemetry is disabled,
    no endpoint is configured, or setup fails. In every ``None`` case the
    OTel API stays on its no-op implementation, so spans and metric calls in
    the vendor client cost nothing.
    """
    if config is None:
        config = TelemetryConfig()
    config = config.resolve()

    if not config.enabled:
        logger.info("Telemetry disabled (WARRANTY_OTEL_ENABLED=false)")
        return None
    if config.otlp_endpoint is None:
        logger.info("No OTLP endpoint configured; tracing will be no-op")
        return None

    try:
        providers = _build_providers(config)
    except Exception:
        logger.exception("Failed to configure OTel telemetry; tracing will be no-op")
        return None

    trace.set_tracer_provider(providers.tracer_provider)
    if providers.meter_provider is not None:
        metrics.set_meter_provider(providers.meter_provider)
    _auto_instrument(config, providers.tracer_provider)

    logger.info(
        "Telemetry exporting to %s (%s) as %s",
        config.otlp_endpoint,
        config.otlp_protocol,
        config.service_name,
    )
    return providers


def _build_providers(config: TelemetryConfig) -> TelemetryProviders:
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider as _TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor

    resource = Resource.create({"service.name": config.service_name})

    tracer_provider = _TracerProvider(resource=resource)
    span_exporter = _build_span_exporter(config)
    if config.batch:
        tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
    else:
        tracer_provider.add_span_processor(SimpleSpanProcessor(span_exporter))

    meter_provider = None
    if config.export_metrics:
        from opentelemetry.sdk.metrics import MeterProvider as _MeterProvider
        from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader

        reader = PeriodicExportingMetricReader(
            _build_metric_exporter(config),
            export_interval_millis=config.metrics_interval_seconds * 1000,
        )
        meter_provider = _MeterProvider(resource=resource, metric_readers=[reader])

    return TelemetryProviders(tracer_provider=tracer_provider, meter_provider=meter_provider)


def _build_span_exporter(config: TelemetryConfig):
    headers = dict(config.otlp_headers) or None

    if config.otlp_protocol == "http/protobuf":
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        return OTLPSpanExporter(endpoint=config.otlp_endpoint, headers=headers)

    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

    return OTLPSpanExporter(endpoint=config.otlp_endpoint, headers=headers)


def _build_metric_exporter(config: TelemetryConfig):
    headers = dict(config.otlp_headers) or None

    if config.otlp_protocol == "http/protobuf":
        from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter

        return OTLPMetricExporter(endpoint=config.otlp_endpoint, headers=headers)

    from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

    return OTLPMetricExporter(endpoint=config.otlp_endpoint, headers=headers)


def _auto_instrument(config: TelemetryConfig, provider: TracerProvider) -> None:
    if not config.instrument_httpx:
        return
    try:
        from opentelemetry.instrumentation.httpx import (  # type: ignore[import-untyped]
            HTTPXClientInstrumentor,
        )
    except ImportError:
        logger.debug("opentelemetry-instrumentation-httpx not installed; skipping")
        return

    HTTPXClientInstrumentor().instrument(tracer_provider=provider)
    logger.debug("httpx auto-instrumentation enabled")
