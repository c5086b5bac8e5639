from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar, Union

from cfn_handler.clients import BotoClientRegistry, ClientRegistry
from cfn_handler.exceptions import InvalidProgressEvent
from cfn_handler.interface import (
    BaseModel,
    Credentials,
    HandlerErrorCode,
    OperationStatus,
    Properties,
)
from cfn_handler.serialization import (
    PROGRESS_EVENT_SCHEMA,
    RESOURCE_HANDLER_REQUEST_SCHEMA,
    deserialize,
    serialize,
)

Context = TypeVar("Context")


def _to_member(enum_cls: Type[Enum], value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _to_model(model_cls: Type[BaseModel], data: Mapping[str, Any]) -> BaseModel:
    # an empty mapping is a model without properties
    return model_cls._deserialize(data) or model_cls()


class SessionProxy:
    """
    Factory for service clients, bound once to the credentials and region of an invocation. Every call to
    ``client`` builds a new client, nothing is cached.
    """

    def __init__(self, options: Mapping[str, Any], registry: Optional[ClientRegistry] = None):
        self._options: Dict[str, Any] = dict(options)
        self._registry: ClientRegistry = registry if registry is not None else BotoClientRegistry()

    @property
    def options(self) -> Dict[str, Any]:
        return dict(self._options)

    def client(self, name: str, options: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Builds a client for the given service.

        :param name: the service name, as known to the client registry (e.g., ``s3``)
        :param options: per-call configuration, overriding the session configuration key by key
        :return: a new client
        """
        factory = self._registry[name]
        return factory({**self._options, **(options or {})})

    @staticmethod
    def get_session(
        credentials: Optional[Credentials] = None,
        region: Optional[str] = None,
        registry: Optional[ClientRegistry] = None,
    ) -> Optional[SessionProxy]:
        if credentials is None:
            return None
        return SessionProxy({"credentials": credentials, "region": region}, registry=registry)


@dataclass(frozen=True)
class ProgressEvent(Generic[Properties, Context]):
    # whether the handler has reached a terminal state or is still computing and requires more time to complete
    status: OperationStatus

    # should be provided if the status is FAILED (or IN_PROGRESS, to flag a degrading condition)
    error_code: Optional[HandlerErrorCode] = None

    # contextual information shown to callers, e.g. to indicate the nature of a progress transition
    message: str = ""

    # arbitrary datum passed back to the handler on the next invocation, e.g. an identifier to continue polling
    callback_context: Optional[Context] = None

    # the next invocation is scheduled no sooner than this many seconds
    callback_delay_seconds: int = 0

    # populated by READ, and by CREATE/UPDATE/DELETE for final confirmation
    resource_model: Optional[Properties] = None

    # populated by LIST
    resource_models: Optional[List[Properties]] = None

    # token for requesting the next page of a LIST
    next_token: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        if not isinstance(self.status, OperationStatus):
            return False
        return self.status.is_terminal

    @classmethod
    def builder(
        cls, template: Union[ProgressEvent, Mapping[str, Any], None] = None
    ) -> ProgressEventBuilder:
        return ProgressEventBuilder(template)

    @classmethod
    def from_partial(cls, partial: Optional[Mapping[str, Any]] = None) -> ProgressEvent:
        """
        Creates an event from a partial mapping (keyed by attribute or wire names), e.g. when rehydrating an event
        from its transmitted form. Present fields are copied as they are, absent fields keep their defaults. Known
        status and error code strings are turned into their enum members, unknown ones are kept as they are. The
        result is not validated.
        """
        values = deserialize(partial, PROGRESS_EVENT_SCHEMA)
        if "status" in values:
            values["status"] = _to_member(OperationStatus, values["status"])
        if "error_code" in values:
            values["error_code"] = _to_member(HandlerErrorCode, values["error_code"])
        status = values.pop("status", None)
        return cls(status, **values)

    @classmethod
    def deserialize(
        cls, data: Optional[Mapping[str, Any]], model_cls: Optional[Type[BaseModel]] = None
    ) -> ProgressEvent:
        event = cls.from_partial(data)
        if model_cls is None:
            return event
        changes = {}
        if isinstance(event.resource_model, Mapping):
            changes["resource_model"] = _to_model(model_cls, event.resource_model)
        if event.resource_models is not None:
            changes["resource_models"] = [
                _to_model(model_cls, model) if isinstance(model, Mapping) else model
                for model in event.resource_models
            ]
        return dataclasses.replace(event, **changes)

    def serialize(self) -> dict:
        return serialize(self, PROGRESS_EVENT_SCHEMA)

    @classmethod
    def failed(cls, error_code: HandlerErrorCode, message: str) -> ProgressEvent:
        """
        Convenience method for constructing a FAILED response
        """
        return cls.builder().status(OperationStatus.FAILED).error_code(error_code).message(message).build()

    @classmethod
    def progress(cls, model: Optional[Properties] = None, ctx: Optional[Context] = None) -> ProgressEvent:
        """
        Convenience method for constructing an IN_PROGRESS response
        """
        progress = cls.builder().status(OperationStatus.IN_PROGRESS)
        if ctx is not None:
            progress.callback_context(ctx)
        if model is not None:
            progress.resource_model(model)
        return progress.build()

    @classmethod
    def success(cls, model: Optional[Properties] = None, ctx: Optional[Context] = None) -> ProgressEvent:
        """
        Convenience method for constructing a SUCCESS response
        """
        event = cls.progress(model, ctx)
        return dataclasses.replace(event, status=OperationStatus.SUCCESS)


class ProgressEventBuilder:
    """
    Mutable draft of a ``ProgressEvent``. Every setter returns the builder, ``build`` validates the draft and
    returns the immutable event.
    """

    def __init__(self, template: Union[ProgressEvent, Mapping[str, Any], None] = None):
        self._values: Dict[str, Any] = {}
        if isinstance(template, ProgressEvent):
            for f in dataclasses.fields(template):
                self._values[f.name] = getattr(template, f.name)
        elif template:
            self._values.update(deserialize(template, PROGRESS_EVENT_SCHEMA))

    def _set(self, name: str, value: Any) -> ProgressEventBuilder:
        self._values[name] = value
        return self

    def status(self, status: OperationStatus) -> ProgressEventBuilder:
        return self._set("status", status)

    def error_code(self, error_code: HandlerErrorCode) -> ProgressEventBuilder:
        return self._set("error_code", error_code)

    def message(self, message: str) -> ProgressEventBuilder:
        return self._set("message", message)

    def callback_context(self, callback_context: Any) -> ProgressEventBuilder:
        return self._set("callback_context", callback_context)

    def callback_delay_seconds(self, callback_delay_seconds: int) -> ProgressEventBuilder:
        return self._set("callback_delay_seconds", callback_delay_seconds)

    def resource_model(self, resource_model: Any) -> ProgressEventBuilder:
        return self._set("resource_model", resource_model)

    def resource_models(self, resource_models: List[Any]) -> ProgressEventBuilder:
        return self._set("resource_models", resource_models)

    def next_token(self, next_token: str) -> ProgressEventBuilder:
        return self._set("next_token", next_token)

    def build(self) -> ProgressEvent:
        values = {key: value for key, value in self._values.items() if value is not None}

        status = values.pop("status", None)
        if status is None:
            raise InvalidProgressEvent("A progress event requires a status")
        try:
            status = OperationStatus(status)
            if "error_code" in values:
                values["error_code"] = HandlerErrorCode(values["error_code"])
        except ValueError as e:
            raise InvalidProgressEvent(str(e)) from e

        if status is OperationStatus.FAILED and "error_code" not in values:
            raise InvalidProgressEvent("A FAILED progress event requires an error code")

        if values.get("callback_delay_seconds", 0) < 0:
            raise InvalidProgressEvent(
                f"Invalid callback delay of {values['callback_delay_seconds']} seconds, must not be negative"
            )

        if "resource_model" in values and "resource_models" in values:
            raise InvalidProgressEvent(
                "A progress event carries either a resource model or a list of resource models, not both"
            )

        return ProgressEvent(status, **values)


@dataclass
class ResourceHandlerRequest(Generic[Properties]):
    """
    The request passed to a resource handler, transformed from the invocation payload to only the items of concern.
    """

    client_request_token: str
    desired_resource_state: Optional[Properties] = None
    previous_resource_state: Optional[Properties] = None
    desired_resource_tags: Dict[str, str] = field(default_factory=dict)
    previous_resource_tags: Dict[str, str] = field(default_factory=dict)
    system_tags: Dict[str, str] = field(default_factory=dict)
    aws_account_id: Optional[str] = None
    aws_partition: Optional[str] = None
    logical_resource_identifier: Optional[str] = None
    next_token: Optional[str] = None
    region: Optional[str] = None

    def serialize(self) -> dict:
        return serialize(self, RESOURCE_HANDLER_REQUEST_SCHEMA)
