from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from records.models import Patient
from records.services import store
from records.services.digest import DigestRecord, compute_digest, verify_digest

NOT_SPECIFIED = 'Not specified'


@transaction.atomic
def register_patient(*, patient_name, problem_desc, access_data, age=None, gender=None, contact_no=None, address=None) -> Patient:
    """Create the profile, then stamp it with its integrity digest.

    The digest covers the generated id and profile date, so it can only be
    computed after the row exists.  Both writes share one transaction.
    """
    patient = store.create_patient(
        patient_name=patient_name,
        problem_desc=problem_desc,
        access_data=access_data,
        age=age,
        gender=gender or None,
        contact_no=contact_no or None,
        address=address or None,
    )
    patient.integrity_digest = compute_digest(DigestRecord.from_patient(patient))
    patient.save(update_fields=['integrity_digest'])
    return patient


def check_integrity(patient: Patient) -> bool:
    return bool(patient.integrity_digest) and verify_digest(DigestRecord.from_patient(patient), patient.integrity_digest)


def display_or_default(value) -> str:
    if value is None or value == '':
        return NOT_SPECIFIED
    return str(value)


def format_patient(patient: Patient) -> dict:
    return {
        'id': str(patient.id),
        'patientNumber': patient.patient_number,
        'patientName': patient.patient_name,
        'age': patient.age,
        'gender': patient.gender,
        'contactNo': patient.contact_no,
        'address': patient.address,
        'problemDesc': patient.problem_desc,
        'profileDate': patient.profile_date.isoformat() if patient.profile_date else None,
        'accessData': patient.access_data,
        'revenue': f"{patient.revenue:.2f}",
        'blockchainHash': patient.integrity_digest,
        'createdAt': patient.created_at.isoformat() if patient.created_at else None,
        'updatedAt': patient.updated_at.isoformat() if patient.updated_at else None,
        'display': {
            'age': display_or_default(patient.age),
            'gender': display_or_default(patient.gender),
            'contactNo': display_or_default(patient.contact_no),
            'address': display_or_default(patient.address),
        },
    }


def format_access_log(log) -> dict:
    hospital = getattr(log, 'hospital', None)
    return {
        'id': str(log.id),
        'patientId': str(log.patient_id),
        'hospitalId': str(log.hospital_id),
        'hospitalName': hospital.name if hospital else None,
        'accessTime': log.access_time.isoformat(),
        'allowed': log.allowed,
        'rewardGiven': log.reward_given,
        'searchQuery': log.search_query,
    }


def get_patient_or_none(patient_id) -> Optional[Patient]:
    # non-UUID ids from old links simply do not match
    try:
        return store.get_patient(patient_id)
    except (ValidationError, ValueError, TypeError):
        return None
