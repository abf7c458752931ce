from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("taskflow.core")


class DomainError(APIException):
    """
    Base for errors raised by the policy / workflow layer.

    The HTTP status can be overridden per raise, because the task
    endpoints report denials as 401 and missing tasks as 400.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."
    default_code = "error"

    def __init__(self, detail=None, code=None, status_code=None):
        super().__init__(detail=detail, code=code)
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid"


class AuthorizationError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not authorized."
    default_code = "not_authorized"


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class NotificationDeliveryError(Exception):
    """
    A single notification could not be handed to the transport.
    Caught at the dispatch boundary; never reaches an HTTP response.
    """

    def __init__(self, notification, cause=None):
        self.notification = notification
        self.cause = cause
        super().__init__(f"Could not deliver '{notification.subject}' to {notification.email}: {cause}")


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    response = drf_exception_handler(exc, context)

    if response is not None:
        headers = {}
        if response.has_header("WWW-Authenticate"):
            headers["WWW-Authenticate"] = response["WWW-Authenticate"]
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "errors": response.data,
            },
            status=response.status_code,
            headers=headers,
        )

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
