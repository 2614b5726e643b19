"""
Utility functions for kafka-health.

Contains reusable helper functions used across the application.
"""

from confluent_kafka import KafkaException

from .console import console_manager
from .logutil import logger
from .types import ProbeExitCode


def handle_exception(e: Exception) -> int:
    """Report an exception that escaped the probe and return the exit code.

    Args:
        e: The exception to handle

    Returns:
        The process exit code to use
    """
    logger.debug(f"Unhandled exception: {e}", exc_info=True)

    if isinstance(e, KafkaException):
        console_manager.print_error(f"Kafka client error: {e}")
    elif isinstance(e, (ValueError, TypeError)):
        console_manager.print_error(str(e))
        return ProbeExitCode.MISCONFIGURED.value
    elif isinstance(e, OSError):
        console_manager.print_note("Operating system error", error=e)
    else:
        console_manager.print_error(f"Unexpected error: {e}")

    return ProbeExitCode.ERROR.value
