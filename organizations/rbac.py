"""
RBAC (Role-Based Access Control) utilities for the cafe staff dashboard.

This module provides:
- Middleware for attaching admin profile to request
- Decorators for permission-based view access
- Branch scoping helpers shared by every order-derived query
"""

from functools import wraps
from django.shortcuts import redirect
from django.contrib import messages
from django.http import JsonResponse


def get_admin_profile(user):
    """
    Get the AdminUser profile for a Django user.
    Returns None if user doesn't have an admin profile.
    """
    if user is None or not user.is_authenticated:
        return None

    try:
        return user.admin_profile
    except AttributeError:
        return None


def is_admin(user):
    """Superusers and users holding the admin role see every branch."""
    if user is None:
        return False
    if user.is_superuser:
        return True
    admin_profile = get_admin_profile(user)
    return bool(admin_profile and admin_profile.is_admin)


class RBACMiddleware:
    """
    Middleware that attaches admin profile and role info to the request.

    After this middleware runs, you can access:
    - request.admin_profile: The AdminUser instance (or None)
    - request.user_role: The role name (or None)
    - request.is_admin: Boolean
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        admin_profile = get_admin_profile(getattr(request, "user", None))
        request.admin_profile = admin_profile

        if admin_profile:
            request.user_role = admin_profile.role.name if admin_profile.role else None
        else:
            request.user_role = None
        request.is_admin = is_admin(getattr(request, "user", None))

        response = self.get_response(request)
        return response


def _has_permission(request, permission):
    admin_profile = getattr(request, "admin_profile", None) or get_admin_profile(request.user)
    return bool(admin_profile and admin_profile.has_permission(permission))


def permission_required(*permissions):
    """
    Decorator that requires user to have all specified permissions.
    Superusers are always allowed.

    Usage:
        @permission_required('can_send_campaigns')
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if request.user.is_superuser:
                return view_func(request, *args, **kwargs)

            if not get_admin_profile(request.user):
                messages.error(request, "You need an admin profile to access this page.")
                return redirect("admin:index")

            for perm in permissions:
                if not _has_permission(request, perm):
                    messages.error(request, "You don't have permission to perform this action.")
                    return redirect("admin:index")

            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


def api_permission_required(*permissions):
    """
    Same as permission_required, but answers JSON endpoints with a 403
    payload instead of a redirect.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if request.user.is_superuser:
                return view_func(request, *args, **kwargs)

            if not all(_has_permission(request, perm) for perm in permissions):
                return JsonResponse(
                    {"message": "You don't have permission to perform this action."},
                    status=403,
                )

            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


# ============ Query Helpers ============

def get_user_branch_ids(user):
    """
    Branch ids the user may see.
    Returns None for admins (no restriction) and a possibly empty list otherwise.
    """
    if is_admin(user):
        return None

    admin_profile = get_admin_profile(user)
    if not admin_profile:
        return []

    return admin_profile.get_accessible_branch_ids()


def scope_orders(queryset, user, field="branch"):
    """
    Restrict an order-like queryset to the user's branches.

    `field` is the lookup path from the queryset's model to the branch, e.g.
    "branch" for Order, "order__branch" for OrderItem or "orders__branch"
    when filtering customers through their orders. Non-admin users without
    any branch assignment get no rows at all.
    """
    branch_ids = get_user_branch_ids(user)

    if branch_ids is None:
        return queryset

    if not branch_ids:
        return queryset.none()

    return queryset.filter(**{f"{field}__in": branch_ids})


def get_user_branches(user):
    """Get all branches accessible by this user."""
    from organizations.models import Branch

    branches = Branch.objects.filter(is_active=True)
    return scope_orders(branches, user, field="pk")


def get_user_orders(user):
    """Get all orders accessible by this user."""
    from orders.models import Order

    return scope_orders(Order.objects.all(), user)
