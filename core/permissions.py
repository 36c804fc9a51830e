from rest_framework import permissions


def is_platform_admin(user):
    return bool(user and user.is_authenticated and user.is_admin)


def owns_shop(user, shop):
    return bool(user and user.is_authenticated and shop.owner_id == user.pk)


class IsPlatformAdmin(permissions.BasePermission):
    message = 'Only administrators can access this area.'

    def has_permission(self, request, view):
        return is_platform_admin(request.user)


class IsShopOwnerOrAdmin(permissions.BasePermission):
    """Object may be a shop or anything with a ``shop`` attribute."""
    message = 'Only the shop owner can manage this shop.'

    def has_object_permission(self, request, view, obj):
        shop = getattr(obj, 'shop', obj)
        return is_platform_admin(request.user) or owns_shop(request.user, shop)


class IsAppointmentParty(permissions.BasePermission):
    message = 'You are not part of this appointment.'

    def has_object_permission(self, request, view, obj):
        user = request.user
        return (
            is_platform_admin(user)
            or obj.customer_id == user.pk
            or owns_shop(user, obj.shop)
        )
