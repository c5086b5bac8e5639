from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypedDict, TypeVar

Properties = TypeVar("Properties")

M = TypeVar("M", bound="BaseModel")


class OperationStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self is not OperationStatus.IN_PROGRESS


class HandlerErrorCode(str, Enum):
    NotUpdatable = "NotUpdatable"
    InvalidRequest = "InvalidRequest"
    AccessDenied = "AccessDenied"
    InvalidCredentials = "InvalidCredentials"
    AlreadyExists = "AlreadyExists"
    NotFound = "NotFound"
    ResourceConflict = "ResourceConflict"
    Throttling = "Throttling"
    ServiceLimitExceeded = "ServiceLimitExceeded"
    NotStabilized = "NotStabilized"
    GeneralServiceException = "GeneralServiceException"
    ServiceInternalError = "ServiceInternalError"
    NetworkFailure = "NetworkFailure"
    InternalFailure = "InternalFailure"
    InvalidTypeConfiguration = "InvalidTypeConfiguration"
    HandlerInternalFailure = "HandlerInternalFailure"
    NonCompliant = "NonCompliant"
    Unknown = "Unknown"
    UnsupportedTarget = "UnsupportedTarget"


class Action(str, Enum):
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LIST = "LIST"


class Credentials(TypedDict):
    accessKeyId: str
    secretAccessKey: str
    sessionToken: str


def remove_none_values(obj: Any) -> Any:
    """Remove None values (recursively) from the given dict or list"""
    if isinstance(obj, dict):
        return {k: remove_none_values(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, list):
        return [remove_none_values(v) for v in obj if v is not None]
    return obj


@dataclasses.dataclass
class BaseModel:
    """
    Base class for resource models. Subclasses are plain dataclasses whose field names match the property names of
    the resource type schema (e.g., ``BucketName``).
    """

    def _serialize(self) -> dict:
        return remove_none_values(dataclasses.asdict(self))

    @classmethod
    def _deserialize(cls: Type[M], json_data: Optional[Mapping[str, Any]]) -> Optional[M]:
        if not json_data:
            return None
        names = {f.name for f in dataclasses.fields(cls)}
        return cls(**{key: value for key, value in json_data.items() if key in names})
