import logging
import os
import time
from typing import Any, List, Optional, Tuple, Union

from cfn_handler.constants import FALSE_STRINGS, LOG_LEVELS, TRACE_LOG_LEVELS, TRUE_STRINGS

# keep track of start time, for performance debugging
load_start_time = time.time()


def eval_log_type(env_var_name: str) -> Union[str, bool]:
    """Get the log type from environment variable"""
    ls_log = os.environ.get(env_var_name, "").lower().strip()
    return ls_log if ls_log in LOG_LEVELS else False


def parse_boolean_env(env_var_name: str) -> Optional[bool]:
    """Parse the value of the given env variable and return True/False, or None if it is not a boolean value."""
    value = os.environ.get(env_var_name, "").lower().strip()
    if value in TRUE_STRINGS:
        return True
    if value in FALSE_STRINGS:
        return False
    return None


def is_env_true(env_var_name: str) -> bool:
    """Whether the given environment variable has a truthy value."""
    return os.environ.get(env_var_name, "").lower().strip() in TRUE_STRINGS


def is_env_not_false(env_var_name: str) -> bool:
    """Whether the given environment variable is empty or has a truthy value."""
    return os.environ.get(env_var_name, "").lower().strip() not in FALSE_STRINGS


def parse_int_env(env_var_name: str, default: int) -> int:
    """Parse the given env variable as a non-negative integer, falling back to the default."""
    value = os.environ.get(env_var_name, "").strip()
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


# whether debug logging is enabled
DEBUG = is_env_true("DEBUG")

# log level of the handler library, one of LOG_LEVELS
CFN_HANDLER_LOG = eval_log_type("CFN_HANDLER_LOG")

# whether to log the full stack trace when a handler fails with an unexpected error
CFN_VERBOSE_ERRORS = is_env_true("CFN_VERBOSE_ERRORS")

# total amount of requested callback delay (in seconds) the local executor tolerates for one operation
CFN_PER_RESOURCE_TIMEOUT = parse_int_env("CFN_PER_RESOURCE_TIMEOUT", 300)

# maximum number of handler invocations the local executor performs for one operation
CFN_MAX_INVOCATIONS = parse_int_env("CFN_MAX_INVOCATIONS", 100)

# disable the retries of the boto clients created through the default client registry
DISABLE_BOTO_RETRIES = is_env_true("DISABLE_BOTO_RETRIES")

# list of environment variable names used for configuration
CONFIG_ENV_VARS = [
    "CFN_HANDLER_LOG",
    "CFN_MAX_INVOCATIONS",
    "CFN_PER_RESOURCE_TIMEOUT",
    "CFN_VERBOSE_ERRORS",
    "DEBUG",
    "DISABLE_BOTO_RETRIES",
]


def is_trace_logging_enabled():
    if CFN_HANDLER_LOG:
        log_level = str(CFN_HANDLER_LOG).upper()
        return log_level.lower() in TRACE_LOG_LEVELS
    return False


def collect_config_items() -> List[Tuple[str, Any]]:
    """Returns a list of key-value tuples of handler configuration values."""
    none = object()  # sentinel object

    values = globals()

    result = []
    for k in CONFIG_ENV_VARS:
        v = values.get(k, none)
        if v is none:
            continue
        result.append((k, v))

    result.sort()
    return result


# set log levels immediately, but will be overwritten later by setup_logging
if DEBUG:
    logging.getLogger("").setLevel(logging.DEBUG)
    logging.getLogger("cfn_handler").setLevel(logging.DEBUG)

LOG = logging.getLogger(__name__)
if is_trace_logging_enabled():
    load_end_time = time.time()
    LOG.debug(
        "Initializing the configuration took %s ms", int((load_end_time - load_start_time) * 1000)
    )
