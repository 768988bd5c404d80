"""
Subscription tiers and what they unlock.

The UI reads these to grey out options, but every state change re-checks
them through `check` on the server.
"""
from collections import OrderedDict

from subdomains.exceptions import PolicyViolation
from subdomains.validators import DEFAULT_TTL

FREE = 'free'
PRO = 'pro'
ENTERPRISE = 'enterprise'

PLAN_CHOICES = OrderedDict([
    (FREE, 'Free'),
    (PRO, 'Pro'),
    (ENTERPRISE, 'Enterprise'),
])

RECORD_TYPES = ['A', 'CNAME', 'TXT', 'SRV', 'MX']
RECORD_TYPE_CHOICES = [(rtype, rtype) for rtype in RECORD_TYPES]

FREE_RECORD_TYPES = frozenset(['A', 'CNAME'])
FREE_TTLS = frozenset([DEFAULT_TTL])

ANY_TTL = 'any'


def is_pro(tier):
    return tier in (PRO, ENTERPRISE)


def allowed_record_types(tier):
    if is_pro(tier):
        return frozenset(RECORD_TYPES)
    return FREE_RECORD_TYPES


def allowed_ttls(tier):
    if is_pro(tier):
        return ANY_TTL
    return FREE_TTLS


def check(tier, record_type, ttl):
    if record_type not in allowed_record_types(tier):
        raise PolicyViolation(
            '{} records are not available on the {} plan.'.format(record_type, tier))
    ttls = allowed_ttls(tier)
    if ttls != ANY_TTL and ttl not in ttls:
        raise PolicyViolation('TTL {} is not available on the {} plan.'.format(ttl, tier))
