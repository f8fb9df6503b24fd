from perf_monitor.core.config import Settings, settings
from perf_monitor.core.logger import COMPONENT, configure_logging, get_logger
from perf_monitor.runtime.observer import PerformanceRuntime
from perf_monitor.services.collector import MetricsCollector

logger = get_logger("perf_monitor.startup")


def initialize_application(config: Settings = settings):
    """Configure logging and build the runtime/collector pair for the app."""
    configure_logging()
    logger.info(
        "initializing_application",
        extra={"component": COMPONENT, "service": config.otel_service_name},
    )

    runtime = PerformanceRuntime(config.supported_entry_types)
    collector = MetricsCollector(runtime, config=config)
    if config.monitor_on_startup:
        collector.start_monitoring()

    logger.info(
        "application_initialized",
        extra={
            "component": COMPONENT,
            "supported_entry_types": sorted(runtime.supported_entry_types),
            "observers": collector.active_observers,
        },
    )
    return runtime, collector
