"""
Serialization of the data exchanged with the orchestrator.

Which attributes of an object end up in its serialized form is declared explicitly by a schema, a mapping from
attribute name to a ``Field`` naming the wire key and the condition under which the attribute is included. Anything
that is not declared (e.g., the builder or the convenience constructors of ``ProgressEvent``) is never serialized.
"""
import dataclasses
from enum import Enum
from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional

from cfn_handler.interface import BaseModel, remove_none_values


def always(value: Any) -> bool:
    return True


def is_present(value: Any) -> bool:
    return value is not None


class Field(NamedTuple):
    wire_name: str
    include: Callable[[Any], bool] = is_present


Schema = Dict[str, Field]

PROGRESS_EVENT_SCHEMA: Schema = {
    "status": Field("status", always),
    "error_code": Field("errorCode"),
    "message": Field("message", always),
    "callback_context": Field("callbackContext"),
    "callback_delay_seconds": Field("callbackDelaySeconds", always),
    "resource_model": Field("resourceModel"),
    "resource_models": Field("resourceModels"),
    "next_token": Field("nextToken"),
}

RESOURCE_HANDLER_REQUEST_SCHEMA: Schema = {
    "client_request_token": Field("clientRequestToken"),
    "desired_resource_state": Field("desiredResourceState"),
    "previous_resource_state": Field("previousResourceState"),
    "desired_resource_tags": Field("desiredResourceTags"),
    "previous_resource_tags": Field("previousResourceTags"),
    "system_tags": Field("systemTags"),
    "aws_account_id": Field("awsAccountId"),
    "aws_partition": Field("awsPartition"),
    "logical_resource_identifier": Field("logicalResourceIdentifier"),
    "next_token": Field("nextToken"),
    "region": Field("region"),
}


def to_wire(value: Any) -> Any:
    """Converts a single attribute value into its JSON-compatible representation."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return value._serialize()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return remove_none_values(dataclasses.asdict(value))
    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    if isinstance(value, dict):
        return {key: to_wire(item) for key, item in value.items()}
    return value


def serialize(obj: Any, schema: Schema) -> dict:
    """
    Serializes the given object according to the schema.

    :param obj: the object to serialize, each schema key must be an attribute of it
    :param schema: the serialization schema
    :return: a dict keyed by wire names, containing only the included attributes
    """
    result = {}
    for attribute, field in schema.items():
        value = getattr(obj, attribute)
        if field.include(value):
            result[field.wire_name] = to_wire(value)
    return result


def deserialize(data: Optional[Mapping[str, Any]], schema: Schema) -> dict:
    """
    Maps the keys of a serialized (or partial) object back to attribute names. Keys may be given either by wire name
    or by attribute name; unknown keys are dropped. Values are copied verbatim.

    :param data: the serialized form
    :param schema: the serialization schema
    :return: a dict of attribute names to values, containing only the keys present in ``data``
    """
    if not data:
        return {}
    result = {}
    for attribute, field in schema.items():
        if field.wire_name in data:
            result[attribute] = data[field.wire_name]
        elif attribute in data:
            result[attribute] = data[attribute]
    return result

