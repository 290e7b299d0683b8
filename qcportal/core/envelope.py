"""
Response envelopes.

Every API response has the shape the browser UI expects:
    {"success": true,  "data": ...}
    {"success": false, "error": "message", "details": {...}}
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_success(data=None, status_code=status.HTTP_200_OK, message=None):
    """Wrap data in a success envelope"""
    body = {'success': True, 'data': data}
    if message:
        body['message'] = message
    return Response(body, status=status_code)


def api_error(error, status_code=status.HTTP_400_BAD_REQUEST, details=None):
    """Wrap an error message in a failure envelope"""
    body = {'success': False, 'error': error}
    if details:
        body['details'] = details
    return Response(body, status=status_code)


def first_error_message(errors):
    """
    Flatten serializer errors into a single human-readable message.

    {'projectNo': ['This field is required.']} -> 'projectNo: This field is required.'
    """
    if isinstance(errors, dict):
        for field, value in errors.items():
            message = first_error_message(value)
            if field == 'non_field_errors':
                return message
            return f"{field}: {message}"
        return 'Invalid request'
    if isinstance(errors, (list, tuple)):
        if not errors:
            return 'Invalid request'
        return first_error_message(errors[0])
    return str(errors)


def validation_error(errors):
    """Failure envelope for serializer validation errors"""
    return api_error(first_error_message(errors), status.HTTP_400_BAD_REQUEST, details=errors)


def envelope_exception_handler(exc, context):
    """DRF exception handler that keeps the envelope shape for framework errors"""
    response = exception_handler(exc, context)
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown view'
    if response is None:
        logger.error(f"Unhandled error in {view_name}: {str(exc)}", exc_info=exc)
        return api_error('An unexpected error occurred', status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = response.data
    if isinstance(data, dict) and 'detail' in data and len(data) == 1:
        message = str(data['detail'])
        details = None
    else:
        message = first_error_message(data)
        details = data

    logger.debug(f"API error in {view_name}: {message}")

    response.data = {'success': False, 'error': message}
    if details:
        response.data['details'] = details
    return response
