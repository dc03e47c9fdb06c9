from enum import Enum

API_PREFIX = "/v1"

# Registry paging token, forwarded as-is between client and IoT Hub.
CONTINUATION_TOKEN_HEADER = "x-ms-continuation"


class EnumEnvironment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class EnumLogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
