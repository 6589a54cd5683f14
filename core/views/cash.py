"""
Cash payment endpoints.

``POST /api/cash`` records a cash payment against previous invoices or
as a caution deposit. Validation errors and database failures are not
answered here: they are raised to the project-wide exception handler
(``core.exceptions.api_exception_handler``).
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from core import db
from core.authentication import get_session_project_id
from core.permissions import HasActiveProject, IsProjectMember
from core.serializers.cash import CashCreateSerializer
from core.services.cash import create_cash_payment


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasActiveProject, IsProjectMember])
@throttle_classes([ScopedRateThrottle])
def create_cash(request):
    """Create a cash payment; the server generates the uuid when absent."""
    s = CashCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    cash_uuid = create_cash_payment(dict(s.validated_data['payment']), request.user,
                                    get_session_project_id(request))
    return Response({'ok': True, 'uuid': db.unparse(cash_uuid)}, status=status.HTTP_201_CREATED)

create_cash.cls.throttle_scope = 'cash_write'
