import re

import dns.exception
import dns.ipv4
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator

SUBDOMAIN_MIN_LENGTH = 3
SUBDOMAIN_MAX_LENGTH = 63
TTL_MIN = 60
TTL_MAX = 86400
DEFAULT_TTL = 3600

_UNSAFE_CHARS = re.compile(r'[^a-z0-9-]')

validate_label = RegexValidator(
    regex=r'^[a-z0-9]([a-z0-9-]*[a-z0-9])?$',
    message=u'Subdomain may only contain letters, digits and inner hyphens',
    code='invalid_subdomain'
)

validate_hostname = RegexValidator(
    regex=(r'^(?=[a-z0-9\-\.]{1,253}$)([a-z0-9](([a-z0-9\-]){,61}[a-z0-9])?\.)'
           r'*([a-z0-9](([a-z0-9\-]){,61}[a-z0-9])?)$'),
    message=u'Invalid hostname',
    code='invalid_hostname'
)


def sanitize_subdomain(value):
    """Lowercase and drop every character that can't appear in a label."""
    return _UNSAFE_CHARS.sub('', (value or '').lower())


def validate_subdomain(value):
    if not SUBDOMAIN_MIN_LENGTH <= len(value) <= SUBDOMAIN_MAX_LENGTH:
        raise ValidationError(
            u'Subdomain must be between %(min)d and %(max)d characters',
            code='invalid_length',
            params={'min': SUBDOMAIN_MIN_LENGTH, 'max': SUBDOMAIN_MAX_LENGTH})
    validate_label(value)


def clean_subdomain(value):
    cleaned = sanitize_subdomain(value)
    validate_subdomain(cleaned)
    return cleaned


def validate_ipv4(value):
    try:
        dns.ipv4.inet_aton(value)
    except dns.exception.SyntaxError:
        raise ValidationError(u'Value is not a valid IPv4 address', code='invalid_ipv4')


def validate_ttl(value):
    if value is None or not TTL_MIN <= value <= TTL_MAX:
        raise ValidationError(
            u'TTL must be between %(min)d and %(max)d seconds',
            code='invalid_ttl', params={'min': TTL_MIN, 'max': TTL_MAX})
