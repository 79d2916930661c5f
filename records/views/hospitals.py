"""
Hospital endpoints: record search plus the small directory and
bootstrap helpers the front-end needs.
"""
from __future__ import annotations

from django.conf import settings
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from records.permissions import IsHospital
from records.serializers.search import HospitalSearchSerializer
from records.services import store
from records.services.audit import log_action
from records.services.hospitals import default_hospital_names, ensure_hospitals
from records.services.search import search


@api_view(['POST'])
@permission_classes([IsHospital])
def hospital_search(request):
    """Search patient conditions as the logged-in hospital.

    The hospital identity comes from the session, never from the body.
    Every matched patient is logged; patients that did not grant access
    are returned redacted.
    """
    s = HospitalSearchSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    outcome = search(s.validated_data['query'], request.user)
    return Response(outcome.as_dict())


@api_view(['GET'])
@permission_classes([AllowAny])
def list_hospitals(request):
    """Names patients can pick from when granting access."""
    return Response([{'id': str(h.id), 'name': h.name} for h in store.list_hospitals()])


@api_view(['POST'])
@permission_classes([AllowAny])
def init_hospitals(request):
    """Create the default hospital accounts.  Development only."""
    if settings.ENV == 'prod':
        return Response({'ok': False, 'message': 'Hospital initialization not allowed in production'}, status=403)
    created = [h.name for h, is_new in ensure_hospitals(default_hospital_names()) if is_new]
    log_action(hospital=None, action='hospital_init', object_type='hospital', detail={'created': created})
    return Response({'message': 'Hospitals initialized successfully', 'created': created})
