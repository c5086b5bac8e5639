from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from cfn_handler.interface import HandlerErrorCode

if TYPE_CHECKING:
    from cfn_handler.proxy import ProgressEvent


class InvalidProgressEvent(ValueError):
    """
    Raised when a progress event draft violates the event contract (e.g., a FAILED event without error code).
    """

    pass


class BaseHandlerException(Exception):
    """
    An exception which can be raised by a resource handler to report a failure. The invocation framework converts it
    into a FAILED progress event carrying ``error_code`` and the exception message.
    Do not raise this exception directly, use one of the subclasses instead.
    """

    error_code: HandlerErrorCode = HandlerErrorCode.InternalFailure

    def __init__(self, message: str, error_code: Optional[HandlerErrorCode] = None):
        if error_code is not None:
            self.error_code = error_code
        self.message = message
        super().__init__(message)

    def to_progress_event(self) -> ProgressEvent:
        from cfn_handler.proxy import ProgressEvent

        return ProgressEvent.failed(self.error_code, self.message)


class NotUpdatable(BaseHandlerException):
    error_code = HandlerErrorCode.NotUpdatable


class InvalidRequest(BaseHandlerException):
    error_code = HandlerErrorCode.InvalidRequest


class AccessDenied(BaseHandlerException):
    error_code = HandlerErrorCode.AccessDenied


class InvalidCredentials(BaseHandlerException):
    error_code = HandlerErrorCode.InvalidCredentials


class AlreadyExists(BaseHandlerException):
    error_code = HandlerErrorCode.AlreadyExists

    def __init__(self, type_name: str, identifier: Any):
        super().__init__(f"Resource of type '{type_name}' with identifier '{identifier}' already exists.")


class NotFound(BaseHandlerException):
    error_code = HandlerErrorCode.NotFound

    def __init__(self, type_name: str, identifier: Any):
        super().__init__(f"Resource of type '{type_name}' with identifier '{identifier}' was not found.")


class ResourceConflict(BaseHandlerException):
    error_code = HandlerErrorCode.ResourceConflict


class Throttling(BaseHandlerException):
    error_code = HandlerErrorCode.Throttling


class ServiceLimitExceeded(BaseHandlerException):
    error_code = HandlerErrorCode.ServiceLimitExceeded


class NotStabilized(BaseHandlerException):
    error_code = HandlerErrorCode.NotStabilized


class GeneralServiceException(BaseHandlerException):
    error_code = HandlerErrorCode.GeneralServiceException


class ServiceInternalError(BaseHandlerException):
    error_code = HandlerErrorCode.ServiceInternalError


class NetworkFailure(BaseHandlerException):
    error_code = HandlerErrorCode.NetworkFailure


class InternalFailure(BaseHandlerException):
    error_code = HandlerErrorCode.InternalFailure


class InvalidTypeConfiguration(BaseHandlerException):
    error_code = HandlerErrorCode.InvalidTypeConfiguration

    def __init__(self, type_name: str, reason: str):
        super().__init__(f"Invalid TypeConfiguration provided for type '{type_name}'. Reason: {reason}")


class NoResourceHandler(Exception):
    pass
