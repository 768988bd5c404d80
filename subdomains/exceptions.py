from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, PermissionDenied  # noqa: F401

# generic message, nothing about the resource it guards
Forbidden = PermissionDenied


class PolicyViolation(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _('Your plan does not allow this record.')
    default_code = 'policy_violation'


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = _('This subdomain is not available.')
    default_code = 'conflict'


class InvalidTransition(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = _('This request has already been processed.')
    default_code = 'invalid_transition'


class UpstreamError(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = _('The DNS provider could not be reached.')
    default_code = 'upstream_error'


class ProvisioningError(UpstreamError):
    default_detail = _('Failed to create DNS record')
    default_code = 'provisioning_error'
