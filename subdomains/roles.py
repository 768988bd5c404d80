"""
Who may do what.

Always read straight from the role table: a revoked admin must lose access on
the very next call.
"""
from subdomains.models import ADMIN, UserRole


def is_admin(user_id):
    if user_id is None:
        return False
    return UserRole.objects.filter(user_id=user_id, role=ADMIN).exists()


def is_owner(resource_owner_id, caller_id):
    return caller_id is not None and resource_owner_id == caller_id


def can_manage(request, caller_id):
    return is_owner(request.owner_id, caller_id) or is_admin(caller_id)
