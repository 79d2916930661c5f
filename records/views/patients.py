"""
Patient facing endpoints.

Patients have no password: they register a profile, then come back with
their patient number plus contact number (or the profile id itself) to
see the profile, its access history and the revenue it earned.
"""
from __future__ import annotations

import logging

from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from records.serializers.patient import PatientLoginSerializer, PatientLookupSerializer, PatientRegisterSerializer
from records.services import store
from records.services.audit import log_action
from records.services.patients import (
    check_integrity,
    format_access_log,
    format_patient,
    get_patient_or_none,
    register_patient,
)
from records.throttles import LoginRateThrottle, PatientWriteThrottle

logger = logging.getLogger(__name__)


def _patient_or_404(patient_id):
    patient = get_patient_or_none(patient_id)
    if not patient:
        raise NotFound('Patient not found')
    return patient


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([PatientWriteThrottle])
def patient_register(request):
    """Register a new patient profile.

    Accepts the profile fields in camelCase.  ``accessData`` may be a
    space separated string or a list of hospital names.  Returns the new
    id, the sequential patient number and the integrity digest.
    """
    s = PatientRegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    patient = register_patient(
        patient_name=v['patientName'],
        problem_desc=v['problemDesc'],
        access_data=v['accessData'],
        age=v.get('age'),
        gender=v.get('gender'),
        contact_no=v.get('contactNo'),
        address=v.get('address'),
    )
    log_action(hospital=None, action='patient_register', object_type='patient', object_id=patient.id,
               detail={'patientNumber': patient.patient_number})
    logger.info("patient registered: number=%s", patient.patient_number)
    return Response({
        'success': True,
        'patientId': str(patient.id),
        'patientNumber': patient.patient_number,
        'blockchainHash': patient.integrity_digest,
        'message': f"Profile created successfully. Patient #{patient.patient_number}",
    }, status=201)


@api_view(['POST'])
@permission_classes([AllowAny])
def patient_login(request):
    """Log in with patient number + contact number, or with the profile id."""
    s = PatientLoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    number = (s.validated_data.get('patientNumber') or '').strip()
    contact = (s.validated_data.get('contactNo') or '').strip()
    patient_id = (s.validated_data.get('patientId') or '').strip()

    if number and contact:
        try:
            numeric = int(number)
        except ValueError:
            raise ValidationError({'patientNumber': 'Invalid patient number format'})
        patient = store.get_patient_by_number_and_contact(numeric, contact)
        if not patient:
            raise NotFound('Patient not found. Please check your patient number and contact information.')
    elif patient_id:
        patient = _patient_or_404(patient_id)
    else:
        raise ValidationError('Please provide either Patient Number + Contact Number or Patient ID')

    return Response({'success': True, 'patient': format_patient(patient)})


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def patient_lookup(request):
    """Recover the patient id/number from an exact name + contact match."""
    s = PatientLookupSerializer(data=request.data)
    if not s.is_valid():
        raise ValidationError('Patient name and contact number are required')
    patient = store.find_patient_by_name_and_contact(
        s.validated_data['patientName'].strip(),
        s.validated_data['contactNo'].strip(),
    )
    if not patient:
        raise NotFound('No patient found with the provided information')
    return Response({
        'success': True,
        'patientId': str(patient.id),
        'patientNumber': patient.patient_number,
        'patientName': patient.patient_name,
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def patient_access_logs(request, patient_id):
    patient = _patient_or_404(patient_id)
    logs = store.list_access_logs_for_patient(patient.id)
    return Response([format_access_log(log) for log in logs])


@api_view(['GET'])
@permission_classes([AllowAny])
def patient_verify(request, patient_id):
    """Recompute the integrity digest and compare it with the stored one."""
    patient = _patient_or_404(patient_id)
    return Response({
        'patientId': str(patient.id),
        'blockchainHash': patient.integrity_digest,
        'valid': check_integrity(patient),
    })
