"""Logging utilities for the order relay service."""

from .config import get_outbound_logger, setup_service_logger

__all__ = [
    "setup_service_logger",
    "get_outbound_logger",
]
