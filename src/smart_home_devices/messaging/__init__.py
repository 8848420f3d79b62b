"""Messaging - queue-driven home assignment updates."""

from smart_home_devices.messaging.consumer import (
    BatchResult,
    HomeAssignmentConsumer,
    lambda_handler,
)
from smart_home_devices.messaging.sqs_poller import SQSPoller

__all__ = [
    "BatchResult",
    "HomeAssignmentConsumer",
    "lambda_handler",
    "SQSPoller",
]
