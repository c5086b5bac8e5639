from __future__ import annotations

import logging
from typing import (
    Any,
    Callable,
    Dict,
    MutableMapping,
    Optional,
    Type,
    TypedDict,
    TypeVar,
)

from plux import Plugin, PluginManager

from cfn_handler import config
from cfn_handler.clients import ClientRegistry
from cfn_handler.constants import (
    AWS_PARTITIONS_BY_REGION_PREFIX,
    DEFAULT_AWS_PARTITION,
    RESOURCE_PLUGIN_NAMESPACE,
)
from cfn_handler.exceptions import (
    BaseHandlerException,
    InternalFailure,
    InvalidRequest,
    NoResourceHandler,
)
from cfn_handler.interface import Action, BaseModel, Credentials, HandlerErrorCode, Properties
from cfn_handler.proxy import ProgressEvent, ResourceHandlerRequest, SessionProxy

LOG = logging.getLogger(__name__)

HandlerSignature = Callable[
    [Optional[SessionProxy], ResourceHandlerRequest, MutableMapping[str, Any]], ProgressEvent
]
H = TypeVar("H", bound=HandlerSignature)


class RequestData(TypedDict, total=False):
    callerCredentials: Credentials
    providerCredentials: Credentials
    logicalResourceId: str
    resourceProperties: dict
    previousResourceProperties: Optional[dict]
    systemTags: dict[str, str]
    stackTags: dict[str, str]
    previousStackTags: dict[str, str]


class HandlerRequest(TypedDict, total=False):
    action: str
    awsAccountId: str
    bearerToken: str
    region: str
    resourceType: str
    resourceTypeVersion: str
    stackId: str
    nextToken: Optional[str]
    callbackContext: Optional[dict]
    requestData: RequestData


def get_partition(region: Optional[str]) -> str:
    for prefix, partition in AWS_PARTITIONS_BY_REGION_PREFIX.items():
        if region and region.startswith(prefix):
            return partition
    return DEFAULT_AWS_PARTITION


def convert_payload(
    payload: HandlerRequest, model_cls: Optional[Type[BaseModel]] = None
) -> ResourceHandlerRequest[Properties]:
    """
    Transforms the invocation payload into the request handed to a resource handler.

    :param payload: the invocation payload
    :param model_cls: the resource model type; the resource properties are left as dicts if not given
    :return: the resource handler request
    """
    request_data = payload["requestData"]

    def _model(properties: Optional[dict]):
        if model_cls is None:
            return properties
        return model_cls._deserialize(properties)

    return ResourceHandlerRequest(
        client_request_token=payload["bearerToken"],
        desired_resource_state=_model(request_data.get("resourceProperties")),
        previous_resource_state=_model(request_data.get("previousResourceProperties")),
        desired_resource_tags=request_data.get("stackTags") or {},
        previous_resource_tags=request_data.get("previousStackTags") or {},
        system_tags=request_data.get("systemTags") or {},
        aws_account_id=payload.get("awsAccountId"),
        aws_partition=get_partition(payload.get("region")),
        logical_resource_identifier=request_data.get("logicalResourceId"),
        next_token=payload.get("nextToken"),
        region=payload.get("region"),
    )


class Resource:
    """
    Dispatches the invocations of one resource type to the handlers registered for each action.

    Example::

        resource = Resource("Example::Queue::Queue", QueueModel)

        @resource.handler(Action.CREATE)
        def create(session, request, callback_context):
            ...
            return ProgressEvent.success(request.desired_resource_state)
    """

    def __init__(
        self,
        type_name: str,
        model_cls: Optional[Type[BaseModel]] = None,
        client_registry: Optional[ClientRegistry] = None,
    ):
        self.type_name = type_name
        self.model_cls = model_cls
        self._client_registry = client_registry
        self._handlers: Dict[Action, HandlerSignature] = {}

    def handler(self, action: Action) -> Callable[[H], H]:
        def _add_handler(f: H) -> H:
            self._handlers[action] = f
            return f

        return _add_handler

    def invoke(self, payload: HandlerRequest) -> dict:
        """
        Runs the handler of the payload's action and returns the serialized progress event.
        """
        return self.invoke_handler(payload).serialize()

    def invoke_handler(self, payload: HandlerRequest) -> ProgressEvent:
        try:
            action, handler = self._resolve_handler(payload.get("action"))
            try:
                request = convert_payload(payload, self.model_cls)
            except KeyError as e:
                raise InvalidRequest(f"Missing field {e} in invocation payload") from e

            session = SessionProxy.get_session(
                payload["requestData"].get("callerCredentials"),
                payload.get("region"),
                registry=self._client_registry,
            )
            callback_context = payload.get("callbackContext")
            if callback_context is None:
                callback_context = {}

            LOG.debug(
                "Invoking %s handler of %s for %s",
                action.value,
                self.type_name,
                request.logical_resource_identifier,
            )
            event = handler(session, request, callback_context)
            if not isinstance(event, ProgressEvent):
                raise InternalFailure(
                    f"Handler for {action.value} returned {type(event).__name__}, expected ProgressEvent"
                )
        except BaseHandlerException as e:
            LOG.debug(
                "Handler of %s failed with %s: %s", self.type_name, e.error_code.value, e.message
            )
            event = e.to_progress_event()
        except Exception as e:
            log_method = LOG.warning
            if config.CFN_VERBOSE_ERRORS:
                log_method = LOG.exception
            log_method("Unexpected error in handler of %s: %s", self.type_name, e)
            event = ProgressEvent.failed(HandlerErrorCode.InternalFailure, str(e))

        return event

    def _resolve_handler(self, action: Optional[str]) -> tuple[Action, HandlerSignature]:
        try:
            action = Action(action)
        except ValueError:
            raise InvalidRequest(f"Unknown action {action}")
        try:
            return action, self._handlers[action]
        except KeyError:
            raise InvalidRequest(f"No handler for {action.value}")


class ResourcePlugin(Plugin):
    """
    Base class for plugins exposing a ``Resource``. The plugin name is the resource type name, ``load`` sets
    ``resource``.
    """

    namespace = RESOURCE_PLUGIN_NAMESPACE

    def __init__(self):
        self.resource: Optional[Resource] = None


plugin_manager = PluginManager(ResourcePlugin.namespace)


def load_resource(type_name: str) -> Resource:
    """
    Loads the resource registered for the given type name through the plugin manager.

    :raises NoResourceHandler: if no plugin is registered for the type name, or it cannot be loaded
    """
    try:
        plugin = plugin_manager.load(type_name)
    except ValueError:
        # could not find a plugin for that name
        raise NoResourceHandler(type_name)
    except Exception as e:
        LOG.warning(
            "Failed to load resource type %s",
            type_name,
            exc_info=LOG.isEnabledFor(logging.DEBUG),
        )
        raise NoResourceHandler(type_name) from e

    if plugin.resource is None:
        raise NoResourceHandler(type_name)
    return plugin.resource
