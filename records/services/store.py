"""
Persistence primitives over the ORM.

Views and the search pipeline go through these helpers instead of
building querysets inline, so every lookup rule (exact contact match,
case-insensitive condition filter, newest-first logs) lives in one place.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from records.models import AccessLog, Hospital, Patient, PatientNumberSequence

PATIENT_NUMBER_SEQUENCE = 'patient_number'


# ---------------------------------------------------------------------
# Hospitals
# ---------------------------------------------------------------------
def get_hospital(hospital_id) -> Optional[Hospital]:
    return Hospital.objects.filter(id=hospital_id).first()


def get_hospital_by_username(username: str) -> Optional[Hospital]:
    return Hospital.objects.filter(username=username).first()


def create_hospital(*, name: str, username: str, password: str) -> Hospital:
    hospital = Hospital(name=name, username=username)
    hospital.set_password(password)
    hospital.save()
    return hospital


def list_hospitals():
    return Hospital.objects.order_by('name')


# ---------------------------------------------------------------------
# Patients
# ---------------------------------------------------------------------
def get_patient(patient_id) -> Optional[Patient]:
    return Patient.objects.filter(id=patient_id).first()


def get_patient_by_number(patient_number: int) -> Optional[Patient]:
    return Patient.objects.filter(patient_number=patient_number).first()


def get_patient_by_number_and_contact(patient_number: int, contact_no: str) -> Optional[Patient]:
    return Patient.objects.filter(patient_number=patient_number, contact_no=contact_no).first()


def find_patient_by_name_and_contact(patient_name: str, contact_no: str) -> Optional[Patient]:
    return Patient.objects.filter(patient_name=patient_name, contact_no=contact_no).first()


def next_patient_number() -> int:
    """Hand out the next patient number.  Must run inside a transaction.

    The conditional UPDATE takes a row lock that is held until commit, so
    two registrations can never read back the same value.
    """
    PatientNumberSequence.objects.get_or_create(name=PATIENT_NUMBER_SEQUENCE)
    PatientNumberSequence.objects.filter(name=PATIENT_NUMBER_SEQUENCE).update(last_value=F('last_value') + 1)
    return PatientNumberSequence.objects.get(name=PATIENT_NUMBER_SEQUENCE).last_value


@transaction.atomic
def create_patient(**fields) -> Patient:
    fields.setdefault('profile_date', timezone.now())
    return Patient.objects.create(patient_number=next_patient_number(), **fields)


def update_patient_revenue(patient_id, amount: Decimal) -> Decimal:
    """Add ``amount`` to the stored revenue in one UPDATE and return the new total."""
    Patient.objects.filter(id=patient_id).update(revenue=F('revenue') + amount, updated_at=timezone.now())
    return Patient.objects.values_list('revenue', flat=True).get(id=patient_id)


def search_patients_by_condition(query: str):
    return Patient.objects.filter(problem_desc__icontains=query).order_by('patient_number')


# ---------------------------------------------------------------------
# Access logs
# ---------------------------------------------------------------------
def create_access_log(*, patient_id, hospital_id, allowed: bool, reward_given: bool, search_query: str) -> AccessLog:
    return AccessLog.objects.create(
        patient_id=patient_id,
        hospital_id=hospital_id,
        allowed=allowed,
        reward_given=reward_given,
        search_query=search_query,
    )


def list_access_logs_for_patient(patient_id):
    return AccessLog.objects.filter(patient_id=patient_id).select_related('hospital').order_by('-access_time')


def get_recent_reward_log(hospital_id, patient_id, since: datetime) -> Optional[AccessLog]:
    return AccessLog.objects.filter(
        hospital_id=hospital_id,
        patient_id=patient_id,
        reward_given=True,
        access_time__gte=since,
    ).order_by('-access_time').first()
