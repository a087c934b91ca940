"""OpenTelemetry tracing for the Comprehend service.

Requests are traced by the FastAPI instrumentation and SQL statements by the
SQLAlchemy one. Calls leaving the service (object storage uploads and
results API lookups) run inside ``trace_operation`` spans that carry the
attribute keys below, so a request trace shows which bucket and key, or which
table and item, it touched and what the upstream answered.

Exporters:
- ``console``: request and outbound-call spans are written through Loguru
- ``aws`` / ``otlp``: every span over OTLP gRPC (X-Ray through the ADOT
  collector, or any OTLP backend)
- ``none``: tracer provider without an exporter
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Final

from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.trace import SpanKind

from src.core.context import RequestContext
from src.core.exceptions import ComprehendError, ExternalServiceError

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping, Sequence

    from fastapi import FastAPI
    from opentelemetry.util.types import AttributeValue

    from src.core.config import Settings

# Outbound operations
STORAGE_UPLOAD_SPAN: Final[str] = "storage.put_object"
RESULTS_LOOKUP_SPAN: Final[str] = "comprehend.get_results"
OUTBOUND_SPAN_PREFIXES: Final[tuple[str, ...]] = ("storage.", "comprehend.")

# Span attribute keys
CORRELATION_ID_ATTR: Final[str] = "correlation_id"
REQUEST_ID_ATTR: Final[str] = "request_id"
STORAGE_BUCKET_ATTR: Final[str] = "storage.bucket"
STORAGE_KEY_ATTR: Final[str] = "storage.key"
STORAGE_SIZE_ATTR: Final[str] = "storage.size_bytes"
RESULTS_TABLE_ATTR: Final[str] = "comprehend.tablename"
RESULTS_ITEM_ATTR: Final[str] = "comprehend.item_id"
UPSTREAM_SERVICE_ATTR: Final[str] = "upstream.service"
UPSTREAM_STATUS_ATTR: Final[str] = "upstream.status_code"
ERROR_CODE_ATTR: Final[str] = "error.code"

EXCLUDED_URLS: Final[str] = "/health,/docs,/redoc,/openapi.json"


def is_logged_span(span: ReadableSpan) -> bool:
    """Whether the console exporter writes this span.

    Request spans and outbound storage/results spans are kept. ASGI
    send/receive and SQL statement spans are dropped; slow statements are
    already reported by the database session listeners.
    """
    return span.kind is SpanKind.SERVER or span.name.startswith(
        OUTBOUND_SPAN_PREFIXES
    )


class LoguruSpanExporter(SpanExporter):
    """Writes finished request and outbound-call spans as Loguru debug records."""

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        for span in spans:
            span_context = span.get_span_context()
            if not span_context or not is_logged_span(span):
                continue

            attributes = dict(span.attributes or {})
            duration_ms = None
            if span.end_time and span.start_time:
                duration_ms = (span.end_time - span.start_time) // 1_000_000

            logger.bind(
                trace_id=f"0x{span_context.trace_id:032x}",
                span_id=f"0x{span_context.span_id:016x}",
                correlation_id=attributes.pop(
                    CORRELATION_ID_ATTR, RequestContext.get_correlation_id()
                ),
                span_name=span.name,
                duration_ms=duration_ms,
                attributes=attributes,
                status=span.status.status_code.name,
            ).debug("Trace span completed: {}", span.name)

        return SpanExportResult.SUCCESS


def get_span_exporter(settings: Settings) -> SpanExporter | None:
    """Build the exporter selected by ``observability_config.exporter_type``."""
    exporter_type = settings.observability_config.exporter_type

    if exporter_type == "console":
        return LoguruSpanExporter()
    if exporter_type == "none":
        logger.info("Tracing exporter disabled")
        return None

    endpoint = (
        settings.observability_config.exporter_endpoint or "http://localhost:4317"
    )
    logger.info("Using {} span exporter at {}", exporter_type.upper(), endpoint)
    return OTLPSpanExporter(
        endpoint=endpoint,
        insecure=settings.environment == "development",
    )


@lru_cache(maxsize=8)
def get_tracer(name: str) -> trace.Tracer:
    """Return a tracer for the given component name."""
    return trace.get_tracer(name)


def setup_tracing(settings: Settings) -> None:
    """Install the global tracer provider.

    Args:
        settings: Application settings.
    """
    observability = settings.observability_config
    if not observability.enable_tracing:
        logger.info("Tracing disabled by configuration")
        return

    tracer_provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.app_name,
                "service.version": settings.app_version,
                "deployment.environment": settings.environment,
            }
        ),
        sampler=TraceIdRatioBased(observability.trace_sample_rate),
    )
    if exporter := get_span_exporter(settings):
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(tracer_provider)

    logger.info(
        "Tracing configured",
        exporter_type=observability.exporter_type,
        sample_rate=observability.trace_sample_rate,
    )


def instrument_app(app: FastAPI, settings: Settings) -> None:
    """Instrument FastAPI routes and SQLAlchemy engines."""
    if not settings.observability_config.enable_tracing:
        return

    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=EXCLUDED_URLS,
        server_request_hook=add_correlation_id_to_span,
    )
    SQLAlchemyInstrumentor().instrument(
        enable_commenter=True,
        commenter_options={"opentelemetry_values": True},
    )

    logger.info("Application instrumented for tracing")


def add_correlation_id_to_span(span: trace.Span, scope: dict[str, Any]) -> None:
    """Server request hook copying correlation and request IDs onto the span."""
    if span is None or not span.is_recording():
        return

    if correlation_id := RequestContext.get_correlation_id():
        span.set_attribute(CORRELATION_ID_ATTR, correlation_id)

    headers = dict(scope.get("headers", []))
    if request_id := headers.get(b"x-request-id", b"").decode("utf-8"):
        span.set_attribute(REQUEST_ID_ATTR, request_id)


@contextmanager
def trace_operation(
    name: str, attributes: Mapping[str, AttributeValue]
) -> Generator[trace.Span]:
    """Run an outbound call inside a child span.

    A ``ComprehendError`` escaping the block tags the span with its error
    code, and for ``ExternalServiceError`` with the upstream service and
    status, before the span records the exception.

    Args:
        name: Span name, one of the ``*_SPAN`` constants.
        attributes: Initial attributes keyed by the ``*_ATTR`` constants.

    Yields:
        Generator[trace.Span]: The span for the operation.

    Example:
        >>> with trace_operation(
        ...     STORAGE_UPLOAD_SPAN, {STORAGE_BUCKET_ATTR: "comprehend-files"}
        ... ):
        ...     client.put_object(...)
    """
    tracer = get_tracer(__name__)
    with tracer.start_as_current_span(name, attributes=attributes) as span:
        if correlation_id := RequestContext.get_correlation_id():
            span.set_attribute(CORRELATION_ID_ATTR, correlation_id)
        try:
            yield span
        except ComprehendError as e:
            span.set_attribute(ERROR_CODE_ATTR, e.error_code)
            if isinstance(e, ExternalServiceError):
                span.set_attribute(UPSTREAM_SERVICE_ATTR, e.service)
                if e.status_code is not None:
                    span.set_attribute(UPSTREAM_STATUS_ATTR, e.status_code)
            raise
