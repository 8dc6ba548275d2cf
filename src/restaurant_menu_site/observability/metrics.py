"""Custom metrics for the menu site."""

from opentelemetry import metrics

meter = metrics.get_meter("menu-site")

catalog_load_success_counter = meter.create_counter(
    name="catalog_load_success_total",
    description="Total number of successful catalog loads",
    unit="1",
)

catalog_load_failure_counter = meter.create_counter(
    name="catalog_load_failure_total",
    description="Total number of failed catalog loads",
    unit="1",
)

admin_update_success_counter = meter.create_counter(
    name="admin_update_success_total",
    description="Total number of successful admin row updates by operation",
    unit="1",
)

admin_update_failure_counter = meter.create_counter(
    name="admin_update_failure_total",
    description="Total number of failed admin row updates by operation",
    unit="1",
)

data_service_response_time = meter.create_histogram(
    name="data_service_response_time_seconds",
    description="Response time for hosted data service calls",
    unit="s",
)


def record_catalog_load(success: bool, item_count: int = 0) -> None:  # noqa: ARG001
    """Record the outcome of a catalog load.

    Args:
        success: Whether the fetch succeeded
        item_count: Number of items loaded
    """
    if success:
        catalog_load_success_counter.add(1)
    else:
        catalog_load_failure_counter.add(1)


def record_admin_update(operation: str, success: bool) -> None:
    """Record the outcome of an admin commit.

    Args:
        operation: "save" or "toggle"
        success: Whether the data service accepted the update
    """
    counter = admin_update_success_counter if success else admin_update_failure_counter
    counter.add(1, {"operation": operation})


def record_data_service_call(operation: str, duration_seconds: float) -> None:
    """Record a data service call.

    Args:
        operation: The client operation (e.g., "list_available_items")
        duration_seconds: Duration in seconds
    """
    data_service_response_time.record(duration_seconds, {"operation": operation})
