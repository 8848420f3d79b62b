"""Centralized constants for the device registry."""


# ===== DEVICE RECORD =====
class DeviceConstants:
    KEY_ATTRIBUTE = "id"
    REQUIRED_FIELDS = ("id", "mac", "name", "type")
    # Fields a partial update may change, by external (camelCase) name
    MUTABLE_FIELDS = ("name", "mac", "type", "homeId")
    CREATED_AT = "createdAt"
    MODIFIED_AT = "modifiedAt"


# ===== DYNAMODB =====
class StoreConstants:
    DEFAULT_REGION = "us-east-1"
    DEFAULT_TABLE_ENV = "DEVICES_TABLE"


# ===== QUEUE CONSUMER =====
class QueueConstants:
    MAX_BATCH_SIZE = 10  # SQS receive_message hard limit
    DEFAULT_WAIT_SECONDS = 20
    DEFAULT_VISIBILITY_TIMEOUT = 30
    ERROR_BACKOFF_SECONDS = 5.0
