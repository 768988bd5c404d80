from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import ValidationError
from rest_framework.serializers import as_serializer_error
from rest_framework.views import exception_handler


def error_message(detail):
    """First human readable message out of a DRF error detail."""
    if isinstance(detail, dict):
        detail = list(detail.values())
    if isinstance(detail, (list, tuple)):
        return error_message(detail[0]) if detail else ''
    return str(detail)


def custom_exception_handler(excp, context):
    if isinstance(excp, DjangoValidationError):
        excp = ValidationError(detail=as_serializer_error(excp))
    # Call REST framework's default exception handler first,
    # to get the standard error response.
    response = exception_handler(excp, context)
    if response is None:
        return None
    if isinstance(excp, ValidationError):
        response.data = {'error': error_message(response.data), 'errors': response.data}
    else:
        response.data = {'error': error_message(response.data)}
    return response
