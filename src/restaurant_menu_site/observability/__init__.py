"""OpenTelemetry instrumentation and observability utilities."""

from restaurant_menu_site.observability.config import configure_logging, setup_observability
from restaurant_menu_site.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
