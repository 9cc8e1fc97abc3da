"""Logger module for logging messages."""

import os

from logging_utils.config import get_outbound_logger, setup_service_logger

SERVICE_NAME = "relay-service"

logger = setup_service_logger(SERVICE_NAME, log_level=os.getenv("LOG_LEVEL", "INFO"))

outbound_logger = get_outbound_logger(SERVICE_NAME)

__all__ = ["logger", "outbound_logger"]
