"""
Permission classes tied to the project bound to the request credential.
"""
from rest_framework.permissions import BasePermission

from core.authentication import get_session_project_id


class HasActiveProject(BasePermission):
    """Allow only credentials issued by a login into a project."""
    message = 'You must log into a project before recording finance operations.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and get_session_project_id(request))


class IsProjectMember(BasePermission):
    """The bound project must be one the user is still granted."""
    message = 'Access to the active project has been revoked.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            return False
        if user.is_superuser:
            return True
        return user.projects.filter(id=get_session_project_id(request)).exists()
