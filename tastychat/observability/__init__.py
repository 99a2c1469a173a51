"""Logging and metrics for tastychat."""

from tastychat.observability.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
