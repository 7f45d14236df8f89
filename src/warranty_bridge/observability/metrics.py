from __future__ import annotations

from dataclasses import dataclass, field

from opentelemetry import metrics

_METER_NAME = "warranty-bridge.observability"


@dataclass(frozen=True)
class VendorMetrics:
    """Container for vendor client metric instruments.

    Attribute conventions: ``http.response.status_code`` on request duration,
    ``outcome`` on token exchanges and lookups, ``rate_limit.origin`` on
    rejections.
    """

    # --- HTTP ---
    request_duration: metrics.Histogram = field(repr=False)

    # --- Auth ---
    token_exchanges_total: metrics.Counter = field(repr=False)

    # --- Admission ---
    rate_limit_rejections_total: metrics.Counter = field(repr=False)

    # --- Lookups ---
    lookups_total: metrics.Counter = field(repr=False)
    bulk_batch_duration: metrics.Histogram = field(repr=False)


def create_vendor_metrics(
    meter_name: str | None = None,
    meter_provider: metrics.MeterProvider | None = None,
) -> VendorMetrics:
    """Create and return all vendor client metric instruments.

    Instruments are created once per meter name and are safe to call
    multiple times (OTel de-duplicates by name). Without ``meter_provider``
    the global provider is used.
    """
    meter = metrics.get_meter(meter_name or _METER_NAME, meter_provider=meter_provider)

    return VendorMetrics(
        request_duration=meter.create_histogram(
            name="vendor.http.request.duration",
            description="Duration of vendor API HTTP requests",
            unit="s",
        ),
        token_exchanges_total=meter.create_counter(
            name="vendor.auth.token_exchanges.total",
            description="OAuth2 client-credentials exchanges by outcome",
        ),
        rate_limit_rejections_total=meter.create_counter(
            name="vendor.rate_limit.rejections.total",
            description="Requests rejected for rate limiting, by origin",
        ),
        lookups_total=meter.create_counter(
            name="vendor.lookups.total",
            description="Service tag lookups by outcome",
        ),
        bulk_batch_duration=meter.create_histogram(
            name="vendor.bulk.batch.duration",
            description="Duration of one bulk lookup batch",
            unit="s",
        ),
    )
