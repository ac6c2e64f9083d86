"""
Standardized API responses.

Every response body has the shape:
{
    "status": "success" | "error",
    "message": "string message or empty",
    "data": {...} | [] | null
}

Errors raised by the access core carry their machine readable code in
``data.code`` (``authorization_denied``, ``precondition_failed``,
``not_found``) so clients can branch without parsing messages.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status as http_status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Convert DRF's default error payloads into the standard format.

    Model level ``django.core.exceptions.ValidationError`` (raised by
    ``full_clean`` inside services) is treated like a serializer error.
    """
    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, 'error_dict') else exc.messages
        exc = ValidationError(detail)

    response = exception_handler(exc, context)
    if response is None:
        return None

    body = format_error_response(response.data, response.status_code)
    if isinstance(exc, APIException) and not isinstance(exc, ValidationError):
        codes = exc.get_codes()
        if isinstance(codes, str):
            body['data'] = {'code': codes}
    elif isinstance(exc, ValidationError):
        body['data'] = {'code': 'invalid', 'errors': response.data}

    if response.status_code >= 500:
        logger.error(f"Server error in {context.get('view')}: {body['message']}")
    response.data = body
    return response


def format_error_response(errors, status_code):
    """
    Flatten an error payload into one message.

    - {"field": ["error1", "error2"]} -> "field: error1, error2"
    - {"detail": "message"} -> "message"
    - ["error1", "error2"] -> "error1, error2"
    """
    message = ""

    if isinstance(errors, dict):
        error_messages = []
        for field, field_errors in errors.items():
            if field == 'detail':
                message = str(field_errors)
            elif isinstance(field_errors, list):
                error_messages.append(f"{field}: {', '.join(str(e) for e in field_errors)}")
            elif isinstance(field_errors, dict):
                error_messages.append(f"{field}: {format_nested_errors(field_errors)}")
            else:
                error_messages.append(f"{field}: {field_errors}")

        if error_messages:
            message = "; ".join(error_messages)

    elif isinstance(errors, list):
        message = ", ".join(str(e) for e in errors)

    else:
        message = str(errors)

    return {
        "status": "error",
        "message": message,
        "data": None
    }


def format_nested_errors(errors_dict):
    messages = []
    for key, value in errors_dict.items():
        if isinstance(value, list):
            messages.append(f"{key}: {', '.join(str(v) for v in value)}")
        elif isinstance(value, dict):
            messages.append(f"{key}: {format_nested_errors(value)}")
        else:
            messages.append(f"{key}: {value}")
    return "; ".join(messages)


class StandardizedJSONRenderer(JSONRenderer):
    """
    Wraps plain view responses (``Response(serializer.data)``) in the
    standard envelope. Bodies that already carry it are left as they are.
    """

    def render(self, data, accepted_media_type=None, renderer_context=None):
        response = renderer_context.get('response') if renderer_context else None
        # 204 has no body
        if response is not None and response.status_code == 204:
            return b''
        if response is not None and not self.is_already_formatted(data):
            if response.status_code >= 400:
                data = format_error_response(data, response.status_code)
            else:
                data = self.format_success_response(data)

        return super().render(data, accepted_media_type, renderer_context)

    def is_already_formatted(self, data):
        return isinstance(data, dict) and {'status', 'message', 'data'} <= set(data)

    def format_success_response(self, data):
        if isinstance(data, dict) and 'detail' in data:
            message, response_data = str(data['detail']), None
        elif data is None or (isinstance(data, dict) and not data):
            message, response_data = "", None
        else:
            message, response_data = "", data

        return {
            "status": "success",
            "message": message,
            "data": response_data
        }


def success_response(data=None, message="", status_code=http_status.HTTP_200_OK):
    """
    Usage:
        from schoolcases_project.response_formatter import success_response

        return success_response(
            data=CaseSerializer(case).data,
            message="Case created successfully",
            status_code=status.HTTP_201_CREATED
        )
    """
    return Response({
        "status": "success",
        "message": message,
        "data": data
    }, status=status_code)


def error_response(message, data=None, status_code=http_status.HTTP_400_BAD_REQUEST):
    """
    Usage:
        from schoolcases_project.response_formatter import error_response

        return error_response(
            message="Invalid credentials",
            status_code=status.HTTP_401_UNAUTHORIZED
        )
    """
    return Response({
        "status": "error",
        "message": message,
        "data": data
    }, status=status_code)
