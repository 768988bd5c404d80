"""
Typed record targets.

`target_value` is stored as text, but what it may contain depends on the
record type. Each type gets a class that parses, normalizes and renders the
payload the DNS provider expects.
"""
from django.core.exceptions import ValidationError

from subdomains.validators import validate_hostname, validate_ipv4

TARGET_MAX_LENGTH = 255


def _parse_uint16(value, field):
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = -1
    if not 0 <= number <= 65535:
        raise ValidationError(u'%(field)s must be an integer between 0 and 65535',
                              code='invalid_number', params={'field': field})
    return number


def _parse_hostname(value):
    hostname = value.strip().lower().rstrip('.')
    validate_hostname(hostname)
    return hostname


class BaseTarget:
    type = None

    def __eq__(self, other):
        return type(self) is type(other) and str(self) == str(other)

    def __hash__(self):
        return hash((self.type, str(self)))

    def __repr__(self):
        return "<{} {}>".format(type(self).__name__, self)

    @classmethod
    def parse(cls, value):
        raise NotImplementedError

    def to_provider(self, fqdn, ttl):
        return {
            'type': self.type,
            'name': fqdn,
            'content': str(self),
            'ttl': ttl,
            'proxied': False,
        }


class ATarget(BaseTarget):
    type = 'A'

    def __init__(self, address):
        self.address = address

    @classmethod
    def parse(cls, value):
        address = value.strip()
        validate_ipv4(address)
        return cls(address)

    def __str__(self):
        return self.address


class CNAMETarget(BaseTarget):
    type = 'CNAME'

    def __init__(self, hostname):
        self.hostname = hostname

    @classmethod
    def parse(cls, value):
        return cls(_parse_hostname(value))

    def __str__(self):
        return self.hostname


class TXTTarget(BaseTarget):
    type = 'TXT'

    def __init__(self, text):
        self.text = text

    @classmethod
    def parse(cls, value):
        if not value.strip():
            raise ValidationError(u'TXT content can not be empty', code='required')
        return cls(value)

    def __str__(self):
        return self.text


class SRVTarget(BaseTarget):
    type = 'SRV'

    def __init__(self, priority, weight, port, target):
        self.priority = priority
        self.weight = weight
        self.port = port
        self.target = target

    @classmethod
    def parse(cls, value):
        parts = value.split()
        if len(parts) != 4:
            raise ValidationError(u'SRV value must be "priority weight port target"',
                                  code='invalid_srv')
        priority, weight, port, target = parts
        return cls(_parse_uint16(priority, 'priority'), _parse_uint16(weight, 'weight'),
                   _parse_uint16(port, 'port'), _parse_hostname(target))

    def __str__(self):
        return '{} {} {} {}'.format(self.priority, self.weight, self.port, self.target)

    def to_provider(self, fqdn, ttl):
        record = super().to_provider(fqdn, ttl)
        record['data'] = {
            'priority': self.priority,
            'weight': self.weight,
            'port': self.port,
            'target': self.target,
        }
        return record


class MXTarget(BaseTarget):
    type = 'MX'

    def __init__(self, priority, host):
        self.priority = priority
        self.host = host

    @classmethod
    def parse(cls, value):
        parts = value.split()
        if len(parts) != 2:
            raise ValidationError(u'MX value must be "priority host"', code='invalid_mx')
        return cls(_parse_uint16(parts[0], 'priority'), _parse_hostname(parts[1]))

    def __str__(self):
        return '{} {}'.format(self.priority, self.host)

    def to_provider(self, fqdn, ttl):
        record = super().to_provider(fqdn, ttl)
        record['content'] = self.host
        record['priority'] = self.priority
        return record


TARGET_TYPES = {cls.type: cls for cls in (ATarget, CNAMETarget, TXTTarget, SRVTarget, MXTarget)}


def parse_target(record_type, value):
    try:
        target_class = TARGET_TYPES[record_type]
    except KeyError:
        raise ValidationError(u"Type '%(type)s' is not allowed", code='invalid_type',
                              params={'type': record_type})
    if value is None or not value.strip():
        raise ValidationError(u'This field is required', code='required')
    if len(value) > TARGET_MAX_LENGTH:
        raise ValidationError(u'Value must be at most %(max)d characters', code='max_length',
                              params={'max': TARGET_MAX_LENGTH})
    return target_class.parse(value)
