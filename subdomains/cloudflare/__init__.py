from .client import (CloudflareClient, CloudflareError, CloudflareNotFound,  # noqa: F401
                     CloudflareTimeout)


RECORD_COMMENT_PREFIX = 'subdomains:'


def record_comment(request_id):
    """Tag written on every provider record the portal creates."""
    return '{}{}'.format(RECORD_COMMENT_PREFIX, request_id)


def is_managed(record):
    return (record.get('comment') or '').startswith(RECORD_COMMENT_PREFIX)
