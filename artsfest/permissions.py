"""Role gates for the REST API."""

from __future__ import annotations

from rest_framework import permissions

from .models import Profile


def get_profile(user) -> Profile | None:
    if not user or not user.is_authenticated:
        return None
    try:
        return user.profile
    except Profile.DoesNotExist:
        return None


def is_festival_admin(user) -> bool:
    if user and user.is_authenticated and user.is_superuser:
        return True
    profile = get_profile(user)
    return profile is not None and profile.role == Profile.Role.ADMIN


def captain_team(user):
    """The team a captain manages, or ``None``."""

    profile = get_profile(user)
    if profile is None or profile.role != Profile.Role.CAPTAIN:
        return None
    return profile.team


class IsFestivalAdmin(permissions.BasePermission):
    message = "Administrator access required."

    def has_permission(self, request, view) -> bool:
        return is_festival_admin(request.user)


class IsTeamCaptain(permissions.BasePermission):
    message = "Team captain access required."

    def has_permission(self, request, view) -> bool:
        return captain_team(request.user) is not None
