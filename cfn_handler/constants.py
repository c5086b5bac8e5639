import os

# strings to indicate truthy/falsy values
TRUE_STRINGS = ("1", "true", "True")
FALSE_STRINGS = ("0", "false", "False")
# strings with valid log levels for CFN_HANDLER_LOG
LOG_LEVELS = ("trace", "debug", "info", "warn", "error", "warning")

# trace log level, configurable via $CFN_HANDLER_LOG
LOG_TRACE = "trace"
TRACE_LOG_LEVELS = [LOG_TRACE]

# partitions, keyed by the region prefix that selects them
DEFAULT_AWS_PARTITION = "aws"
AWS_PARTITIONS_BY_REGION_PREFIX = {
    "cn-": "aws-cn",
    "us-gov-": "aws-us-gov",
    "us-iso-": "aws-iso",
    "us-isob-": "aws-iso-b",
}

# environment variable to override max pool connections
try:
    MAX_POOL_CONNECTIONS = int(os.environ["MAX_POOL_CONNECTIONS"])
except Exception:
    MAX_POOL_CONNECTIONS = 150

# keys of the caller credentials that must never show up in logs
SENSITIVE_CREDENTIAL_KEYS = ["accessKeyId", "secretAccessKey", "sessionToken", "bearerToken"]

# plux namespace under which resource handlers are registered
RESOURCE_PLUGIN_NAMESPACE = "cfn_handler.resources"
