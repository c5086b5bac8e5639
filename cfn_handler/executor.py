import copy
import logging
import time
from typing import Callable, List

from cfn_handler import config
from cfn_handler.interface import OperationStatus
from cfn_handler.proxy import ProgressEvent
from cfn_handler.resource import HandlerRequest, Resource, load_resource

LOG = logging.getLogger(__name__)


class HandlerExecutor:
    """
    Plays the role of the orchestrator for a single resource operation: invokes the resource handler, and re-invokes
    it for as long as it reports IN_PROGRESS.
    """

    def __init__(
        self,
        resource: Resource,
        *,
        sleep: Callable[[float], None] = time.sleep,
        max_timeout: int = config.CFN_PER_RESOURCE_TIMEOUT,
        max_invocations: int = config.CFN_MAX_INVOCATIONS,
    ):
        self.resource = resource
        self.sleep = sleep
        self.max_timeout = max_timeout
        self.max_invocations = max_invocations
        self.history: List[ProgressEvent] = []

    @classmethod
    def for_type(cls, type_name: str, **kwargs) -> "HandlerExecutor":
        return cls(load_resource(type_name), **kwargs)

    def execute(self, raw_payload: HandlerRequest) -> ProgressEvent:
        """
        Runs the operation described by the payload until the handler reports a terminal status.

        :param raw_payload: the payload of the first invocation, it is not modified
        :return: the terminal progress event
        :raises TimeoutError: if the operation does not terminate within the invocation or delay budget
        """
        payload = copy.deepcopy(raw_payload)
        self.history = []
        total_delay = 0

        for current_invocation in range(self.max_invocations):
            result = self.resource.invoke(payload)
            event = ProgressEvent.deserialize(result, self.resource.model_cls)
            self.history.append(event)

            match event.status:
                case OperationStatus.FAILED | OperationStatus.SUCCESS:
                    return event
                case OperationStatus.IN_PROGRESS:
                    # the callback context is handed back unchanged
                    payload["callbackContext"] = result.get("callbackContext")
                    if "resourceModel" in result:
                        payload["requestData"]["resourceProperties"] = copy.deepcopy(
                            result["resourceModel"]
                        )

                    total_delay += event.callback_delay_seconds
                    if total_delay > self.max_timeout:
                        break

                    LOG.debug(
                        "Operation on %s in progress (invocation %s), next invocation in %s seconds: %s",
                        self.resource.type_name,
                        current_invocation + 1,
                        event.callback_delay_seconds,
                        event.message,
                    )
                    self.sleep(event.callback_delay_seconds)
                case invalid_status:
                    raise ValueError(
                        f"Invalid OperationStatus ({invalid_status}) returned for resource {payload['requestData'].get('logicalResourceId')} (type {self.resource.type_name})"
                    )

        raise TimeoutError(
            f"Operation on resource {payload['requestData'].get('logicalResourceId')} (type {self.resource.type_name}) timed out."
        )
