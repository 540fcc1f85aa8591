from rest_framework.permissions import BasePermission

from restaurants.models import Restaurant, SuperAdmin


class IsRestaurantAdmin(BasePermission):
    """
    Authenticated restaurant admin acting on their own tenant.

    Views routed with an ``admin_uid`` URL kwarg are refused when it names a
    different tenant than the one the token belongs to.
    """
    message = 'Not authorized'

    def has_permission(self, request, view):
        if not isinstance(request.user, Restaurant) or request.auth is None:
            return False

        admin_uid = view.kwargs.get('admin_uid')
        return admin_uid is None or admin_uid == request.user.admin_uid


class IsSuperAdmin(BasePermission):
    message = 'Super admin access required'

    def has_permission(self, request, view):
        return isinstance(request.user, SuperAdmin) and request.auth is not None
