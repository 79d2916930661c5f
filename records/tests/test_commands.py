from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from records.models import Hospital
from records.services import store
from records.services.patients import register_patient

pytestmark = pytest.mark.django_db


def test_ensure_hospitals_is_idempotent(settings):
    settings.DEFAULT_HOSPITALS = ['Hospital1', 'Hospital2']
    out = StringIO()
    call_command('ensure_hospitals', stdout=out)
    call_command('ensure_hospitals', stdout=out)
    assert sorted(Hospital.objects.values_list('name', flat=True)) == ['Hospital1', 'Hospital2']
    assert 'Hospital1 (exists)' in out.getvalue()
    assert store.get_hospital_by_username('Hospital2').check_password('Hospital2')


def test_ensure_hospitals_with_explicit_names():
    call_command('ensure_hospitals', 'CityClinic', stdout=StringIO())
    assert Hospital.objects.filter(name='CityClinic').exists()


def test_ensure_hospitals_rejects_names_with_spaces():
    with pytest.raises(CommandError):
        call_command('ensure_hospitals', 'City Clinic', stdout=StringIO())
    assert Hospital.objects.count() == 0


def test_patient_numbers_are_sequential_and_unique():
    numbers = [
        register_patient(patient_name=f'P{i}', problem_desc='seasonal allergies and asthma',
                         access_data='Hospital1').patient_number
        for i in range(5)
    ]
    assert numbers == [1001, 1002, 1003, 1004, 1005]
