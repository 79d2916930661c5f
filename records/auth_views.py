"""
Hospital authentication views.

Login checks the salted password hash, rotates the session key and
binds the session to the hospital.  The authentication class that reads
the session back lives in ``records.authentication`` so DRF can import it
from settings without pulling in the views.
"""
from __future__ import annotations

import logging

from django.views.decorators.csrf import ensure_csrf_cookie
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from records.authentication import login_hospital, logout_hospital
from records.identity import HospitalIdentity
from records.serializers.auth import HospitalLoginSerializer
from records.services import store
from records.services.audit import log_action
from records.throttles import LoginRateThrottle

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Username/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def hospital_login_view(request):
    s = HospitalLoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']
    password = s.validated_data['password']

    hospital = store.get_hospital_by_username(username)
    if not hospital or not hospital.check_password(password):
        logger.warning("hospital login failed for username=%s", username)
        log_action(hospital=None, action='hospital_login', object_type='hospital', object_id=None,
                   detail={'result': 'fail', 'username': username, 'ip': request.META.get('REMOTE_ADDR')})
        return Response({'ok': False, 'message': 'Invalid credentials'}, status=401)

    login_hospital(request, hospital)
    log_action(hospital=hospital, action='hospital_login', object_type='hospital', object_id=hospital.id,
               detail={'result': 'ok', 'ip': request.META.get('REMOTE_ADDR')})

    return Response({
        'success': True,
        'hospital': {
            'id': str(hospital.id),
            'name': hospital.name,
            'username': hospital.username,
        },
    }, status=200)


@api_view(['POST'])
@permission_classes([AllowAny])
def hospital_logout_view(request):
    identity = request.user if isinstance(request.user, HospitalIdentity) else None
    if identity is not None:
        log_action(hospital=store.get_hospital(identity.id), action='hospital_logout',
                   object_type='hospital', object_id=identity.id)
    logout_hospital(request)
    return Response({'success': True})


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_session_view(request):
    identity = request.user if isinstance(request.user, HospitalIdentity) else None
    if identity is None:
        return Response({'authenticated': False})
    return Response({
        'authenticated': True,
        'hospital': {'id': str(identity.id), 'name': identity.name},
    })

# hand the SPA a CSRF cookie on its first session probe
hospital_session_view = ensure_csrf_cookie(hospital_session_view)
