"""
Authentication views.

Users log in with username and password and pick the project (hospital
site) they will work in. Every login issues its own session token and
JWT pair, and the chosen project is bound to those credentials: every
finance write made with them is stamped with it, whatever the user
does in other logins afterwards.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from core.authentication import PROJECT_CLAIM
from core.serializers.auth import LoginSerializer
from core.services.audit import log_action

from .models import Project, SessionToken, User

logger = logging.getLogger(__name__)


def _project_payload(project: Project | None) -> dict | None:
    if project is None:
        return None
    return {'id': project.id, 'name': project.name, 'abbr': project.abbr}


def _select_project(user: User, project_id: int | None) -> Project | None:
    """Return the project to bind to the new credentials, or raise PermissionError."""
    qs = Project.objects.all() if user.is_superuser else user.projects.all()
    if project_id is None:
        # only an unambiguous membership is picked implicitly
        candidates = list(qs.filter(locked=False)[:2])
        return candidates[0] if len(candidates) == 1 else None
    project = qs.filter(id=project_id).first()
    if project is None:
        raise PermissionError('no access to this project')
    if project.locked:
        raise PermissionError('project is locked')
    return project


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    ip = request.META.get('REMOTE_ADDR')

    user = authenticate(request, username=vd['username'], password=vd['password'])
    if not user:
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'username': vd['username'], 'ip': ip})
        return Response({'ok': False, 'detail': 'Bad username or password.'}, status=400)

    try:
        project = _select_project(user, vd.get('project'))
    except PermissionError as e:
        log_action(user=user, action='login', object_type='user', object_id=user.id,
                   detail={'result': 'denied', 'project': vd.get('project'), 'ip': ip})
        return Response({'ok': False, 'detail': str(e)}, status=403)

    project_id = project.id if project else None
    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'project': project_id, 'ip': ip})
    logger.info('user %s logged into project %s', user.username, project_id)

    token_obj = SessionToken.objects.create(user=user, project=project)
    refresh = RefreshToken.for_user(user)
    refresh[PROJECT_CLAIM] = project_id

    return Response({
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'user': {
            'id': user.id,
            'username': user.username,
            'display_name': user.get_display_name(),
        },
        'project': _project_payload(project),
    }, status=200)

login_view.cls.throttle_scope = 'login'


jwt_refresh_view = TokenRefreshView.as_view()


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token and drop the session token in use."""
    refresh = request.data.get('refresh')
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError as e:
            return Response({'ok': False, 'detail': str(e)}, status=400)
    if isinstance(request.auth, SessionToken):
        request.auth.delete()
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id)
    return Response({'ok': True})
