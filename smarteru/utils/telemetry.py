import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from .. import __version__
from ..config.settings import DEFAULT_API_URL


def setup_telemetry(service_name: str = "smarteru-client", api_url: str = DEFAULT_API_URL):
    resource = Resource(attributes={
        "service.name": service_name,
        "service.version": __version__,
        "smarteru.api_url": api_url,
    })

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)

    return trace.get_tracer("smarteru", __version__)


def setup_logging(log_level: str = "INFO"):
    """Configure root logging; httpx's per-request lines only show at DEBUG."""
    logging.basicConfig(
        level=getattr(logging, log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logging.getLogger("httpx").setLevel(logging.DEBUG if log_level == "DEBUG" else logging.WARNING)
    return logging.getLogger("smarteru")


class ClientMetrics:
    """In-process record of API calls, keyed by SmarterU method name."""

    def __init__(self):
        self.metrics: Dict[str, List[Dict[str, Any]]] = {}

    def record_event(self, method: str, outcome: str, metadata: Optional[Dict[str, Any]] = None):
        self.metrics.setdefault(method, []).append({
            "outcome": outcome,
            "timestamp": datetime.now(),
            "metadata": metadata or {}
        })

    def get_metrics(self, method: Optional[str] = None):
        if method:
            return self.metrics.get(method, [])
        return self.metrics

    def reset(self):
        self.metrics.clear()


client_metrics = ClientMetrics()
