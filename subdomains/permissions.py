from rest_framework.permissions import BasePermission

from subdomains import roles


class IsPortalAdmin(BasePermission):
    def has_permission(self, request, view):
        return roles.is_admin(request.user.pk)
