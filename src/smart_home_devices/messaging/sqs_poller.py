"""SQS Poller - long-polling loop feeding the home assignment consumer.

Used when the consumer runs as a standalone process instead of a Lambda.
"""

import logging, threading
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from smart_home_devices.common.config import Config, get_config
from smart_home_devices.common.constants import QueueConstants
from smart_home_devices.common.exceptions import ConfigurationError
from smart_home_devices.messaging.consumer import BatchResult, HomeAssignmentConsumer
from smart_home_devices.registry.factory import build_service

logger = logging.getLogger(__name__)


class SQSPoller:
    """Receives batches from an SQS queue until stopped.
    
    Every received message is deleted after processing, applied or skipped:
    a message that failed once is logged, not redelivered.
    """
    
    def __init__(
        self,
        consumer: HomeAssignmentConsumer,
        queue_url: str,
        sqs_client: Optional[Any] = None,
        region: Optional[str] = None,
        wait_seconds: int = QueueConstants.DEFAULT_WAIT_SECONDS,
        batch_size: int = QueueConstants.MAX_BATCH_SIZE,
        visibility_timeout: int = QueueConstants.DEFAULT_VISIBILITY_TIMEOUT,
        error_backoff: float = QueueConstants.ERROR_BACKOFF_SECONDS,
    ):
        """Initialize the poller.
        
        Args:
            consumer: Consumer that applies the messages.
            queue_url: URL of the SQS queue.
            sqs_client: boto3 SQS client. Created if not provided.
            region: AWS region for the created client.
            wait_seconds: Long-poll wait per receive call.
            batch_size: Max messages per receive call (1-10).
            visibility_timeout: Seconds a received message stays hidden.
            error_backoff: Seconds to wait after a failed receive.
        """
        self.consumer = consumer
        self.queue_url = queue_url
        self.sqs = sqs_client or boto3.client("sqs", region_name=region)
        self.wait_seconds = wait_seconds
        self.batch_size = batch_size
        self.visibility_timeout = visibility_timeout
        self.error_backoff = error_backoff
        
        self._stop_event = threading.Event()
    
    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "SQSPoller":
        config = config or get_config()
        if not config.queue_url:
            raise ConfigurationError("DEVICES_QUEUE_URL required to run the queue consumer")
        return cls(
            consumer=HomeAssignmentConsumer(build_service(config)),
            queue_url=config.queue_url,
            region=config.aws_region,
            wait_seconds=config.queue_wait_seconds,
            batch_size=config.queue_batch_size,
        )
    
    def poll_once(self) -> Optional[BatchResult]:
        """Receive and process one batch.
        
        Returns:
            The batch result, or None if the receive call failed
        """
        try:
            response = self.sqs.receive_message(
                QueueUrl=self.queue_url,
                MaxNumberOfMessages=self.batch_size,
                WaitTimeSeconds=self.wait_seconds,
                VisibilityTimeout=self.visibility_timeout,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"receive_message failed: {e}")
            return None
        
        messages: List[Dict[str, Any]] = response.get("Messages", [])
        if not messages:
            return BatchResult()
        
        result = self.consumer.process_records(
            {"messageId": m.get("MessageId"), "body": m.get("Body")} for m in messages
        )
        for message in messages:
            self._delete(message)
        return result
    
    def _delete(self, message: Dict[str, Any]) -> None:
        try:
            self.sqs.delete_message(
                QueueUrl=self.queue_url,
                ReceiptHandle=message["ReceiptHandle"],
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"delete_message failed for {message.get('MessageId')}: {e}")
    
    def run(self, max_polls: Optional[int] = None) -> None:
        """Poll until stop() is called or max_polls receive calls were made."""
        logger.info(f"SQS poller started on {self.queue_url}")
        polls = 0
        while not self._stop_event.is_set():
            if max_polls is not None and polls >= max_polls:
                break
            polls += 1
            if self.poll_once() is None:
                self._stop_event.wait(self.error_backoff)
        logger.info("SQS poller stopped")
    
    def stop(self) -> None:
        """Signal the loop to exit after the current receive call."""
        self._stop_event.set()
