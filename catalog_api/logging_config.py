import logging
import os
import opentelemetry.trace
from azure.monitor.opentelemetry import configure_azure_monitor

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_telemetry() -> bool:
    """
    Send traces and logs to Application Insights when hosted in Azure
    Functions or when a connection string is configured.
    """
    if not (
        os.environ.get("FUNCTIONS_WORKER_RUNTIME")
        or os.environ.get("APPLICATIONINSIGHTS_CONNECTION_STRING")
    ):
        return False
    try:
        configure_azure_monitor()
    except Exception as e:
        logging.error(f"Error configuring Azure Monitor: {str(e)}")
        return False
    logging.info("Azure Monitor OpenTelemetry configured successfully")
    return True


configure_telemetry()

tracer = opentelemetry.trace.get_tracer("catalog_api")

logger = logging.getLogger("catalog_api")
logger.setLevel(os.environ.get("CATALOG_LOG_LEVEL", "INFO").upper())

if not logger.handlers:
    # Console output for local runs and the Functions host log stream
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)


def get_child_logger(name):
    """Get a child logger with the given name."""
    return logger.getChild(name)
