"""
Authentication classes that carry the login's project.

A login picks one project; that choice travels with the credential it
issues, never with the user row. ``SessionTokenAuthentication`` looks
up per-login :class:`core.models.SessionToken` keys and JWTs carry a
``project_id`` claim. :func:`get_session_project_id` reads the project
back from ``request.auth`` whichever credential was used.
"""
from __future__ import annotations

from typing import Optional

from rest_framework import authentication

from core.models import SessionToken

PROJECT_CLAIM = 'project_id'


class SessionTokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Token <key>`` against per-login session tokens."""

    keyword = 'Token'
    model = SessionToken


def get_session_project_id(request) -> Optional[int]:
    auth = getattr(request, 'auth', None)
    if auth is None:
        return None
    if isinstance(auth, SessionToken):
        return auth.project_id
    # simplejwt tokens behave like mappings of their claims
    getter = getattr(auth, 'get', None)
    if getter is not None:
        return getter(PROJECT_CLAIM)
    return None
