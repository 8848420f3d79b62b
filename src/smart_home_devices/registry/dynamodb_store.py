"""DynamoDB device store - one item per device, keyed by ``id``."""

import logging, os
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from smart_home_devices.common.constants import DeviceConstants, StoreConstants
from smart_home_devices.common.exceptions import ConfigurationError
from smart_home_devices.registry.store import DeviceStore, DeviceStoreError

logger = logging.getLogger(__name__)

_BACKEND_ERRORS = (ClientError, BotoCoreError)


def _from_dynamo(value: Any) -> Any:
    """Convert DynamoDB numbers (Decimal) back to int/float."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


class DynamoDBDeviceStore(DeviceStore):
    """DynamoDB store for device records."""
    
    DEFAULT_REGION = StoreConstants.DEFAULT_REGION
    
    def __init__(
        self,
        table_name: Optional[str] = None,
        region: Optional[str] = None,
        aws_profile: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        self.table_name = table_name or os.environ.get(StoreConstants.DEFAULT_TABLE_ENV)
        if not self.table_name:
            raise ConfigurationError("DEVICES_TABLE required")
        
        self.region = region or os.environ.get("AWS_DEFAULT_REGION", self.DEFAULT_REGION)
        
        resource_kwargs: Dict[str, Any] = {"region_name": self.region}
        if endpoint_url:
            resource_kwargs["endpoint_url"] = endpoint_url
        
        if aws_profile:
            session = boto3.Session(profile_name=aws_profile)
            self.dynamodb = session.resource("dynamodb", **resource_kwargs)
        else:
            self.dynamodb = boto3.resource("dynamodb", **resource_kwargs)
        
        self.table = self.dynamodb.Table(self.table_name)
        logger.info(f"DynamoDB initialized: {self.table_name} ({self.region})")
    
    @staticmethod
    def _key(device_id: str) -> Dict[str, str]:
        return {DeviceConstants.KEY_ATTRIBUTE: device_id}
    
    def get(self, device_id: str) -> Optional[Dict[str, Any]]:
        try:
            resp = self.table.get_item(Key=self._key(device_id))
        except _BACKEND_ERRORS as e:
            logger.error(f"get_item failed for device {device_id}: {e}")
            raise DeviceStoreError("get_item", e) from e
        
        item = resp.get("Item")
        if not item:
            return None
        return {attr: _from_dynamo(value) for attr, value in item.items()}
    
    def put(self, record: Mapping[str, Any]) -> None:
        item = {attr: value for attr, value in record.items() if value is not None}
        try:
            self.table.put_item(Item=item)
        except _BACKEND_ERRORS as e:
            logger.error(f"put_item failed for device {item.get(DeviceConstants.KEY_ATTRIBUTE)}: {e}")
            raise DeviceStoreError("put_item", e) from e
    
    def partial_update(
        self,
        device_id: str,
        changes: Mapping[str, Any],
        always_set: Mapping[str, Any],
    ) -> None:
        # Every attribute goes through a #placeholder: name and type are
        # DynamoDB reserved words.
        assignments: List[str] = []
        expr_names: Dict[str, str] = {}
        expr_values: Dict[str, Any] = {}
        for attr, value in {**always_set, **changes}.items():
            assignments.append(f"#{attr} = :{attr}")
            expr_names[f"#{attr}"] = attr
            expr_values[f":{attr}"] = value
        
        try:
            self.table.update_item(
                Key=self._key(device_id),
                UpdateExpression="SET " + ", ".join(assignments),
                ExpressionAttributeNames=expr_names,
                ExpressionAttributeValues=expr_values,
            )
        except _BACKEND_ERRORS as e:
            logger.error(f"update_item failed for device {device_id}: {e}")
            raise DeviceStoreError("update_item", e) from e
    
    def delete(self, device_id: str) -> None:
        try:
            self.table.delete_item(Key=self._key(device_id))
        except _BACKEND_ERRORS as e:
            logger.error(f"delete_item failed for device {device_id}: {e}")
            raise DeviceStoreError("delete_item", e) from e
    
    def health_check(self) -> bool:
        try:
            self.table.table_status
            return True
        except _BACKEND_ERRORS as e:
            logger.error(f"Health check failed: {e}")
            return False
