"""Home assignment consumer - applies queued household reassignments.

Each SQS record carries a JSON body ``{"id": ..., "homeId": ...}``. Records
of a batch are applied in order and independently: a malformed body or a
failed store write is logged and skipped, and never aborts the batch.
Nothing is retried here; redelivery is the queue's business.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from smart_home_devices.common.config import get_config
from smart_home_devices.common.exceptions import (
    InvalidMessageError,
    SmartHomeDevicesException,
)
from smart_home_devices.common.logging import configure_logging
from smart_home_devices.data.schemas.device import HomeAssignmentMessage
from smart_home_devices.registry.factory import build_service
from smart_home_devices.registry.service import DeviceService

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one batch, by message id."""
    applied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    
    @property
    def total(self) -> int:
        return len(self.applied) + len(self.skipped)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "applied": len(self.applied),
            "skipped": len(self.skipped),
            "skipped_message_ids": list(self.skipped),
        }


class HomeAssignmentConsumer:
    """Applies home assignment messages through the device service."""
    
    def __init__(self, service: DeviceService):
        self.service = service
    
    def process_records(self, records: Iterable[Any]) -> BatchResult:
        """Process a delivered batch in order.
        
        Args:
            records: SQS records, each a mapping with ``messageId`` and ``body``
        
        Returns:
            BatchResult listing applied and skipped message ids
        """
        result = BatchResult()
        for index, record in enumerate(records):
            message_id = self._message_id(record, index)
            if self.process_record(record, message_id):
                result.applied.append(message_id)
            else:
                result.skipped.append(message_id)
        
        logger.info(
            f"Processed batch of {result.total}: "
            f"{len(result.applied)} applied, {len(result.skipped)} skipped"
        )
        return result
    
    def process_record(self, record: Any, message_id: str) -> bool:
        """Apply a single record. Returns False if it was skipped."""
        body = record.get("body") if isinstance(record, Mapping) else None
        logger.info(f"Received message {message_id} body: {body}")
        
        try:
            message = HomeAssignmentMessage.from_body(body)
            self.service.apply_home_assignment(message)
        except InvalidMessageError as e:
            logger.warning(f"Failed to decode message {message_id}: {e.message}")
            return False
        except SmartHomeDevicesException as e:
            logger.error(f"Failed to apply message {message_id}: {e.code} - {e.message}")
            return False
        except Exception:
            # per-record isolation
            logger.exception(f"Unexpected error processing message {message_id}")
            return False
        
        logger.info(f"Updated device: {message.id} (homeId={message.home_id})")
        return True
    
    @staticmethod
    def _message_id(record: Any, index: int) -> str:
        if isinstance(record, Mapping):
            message_id = record.get("messageId") or record.get("MessageId")
            if isinstance(message_id, str) and message_id:
                return message_id
        return f"record-{index}"


# =============================================================================
# LAMBDA ENTRY POINT
# =============================================================================

_consumer: Optional[HomeAssignmentConsumer] = None


def get_consumer() -> HomeAssignmentConsumer:
    """Get the process-wide consumer, building it from config on first use."""
    global _consumer
    if _consumer is None:
        config = get_config()
        configure_logging(config.log_level.value)
        _consumer = HomeAssignmentConsumer(build_service(config))
    return _consumer


def reset_consumer() -> None:
    """Drop the process-wide consumer (for testing)."""
    global _consumer
    _consumer = None


def lambda_handler(event: Mapping[str, Any], context: Any = None) -> Dict[str, Any]:
    """AWS Lambda handler for SQS-triggered batches."""
    records = event.get("Records") or []
    return get_consumer().process_records(records).to_dict()
