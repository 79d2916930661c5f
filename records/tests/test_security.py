import pytest
from django.db import DatabaseError
from django.urls import reverse
from rest_framework.test import APIClient

from records.models import AccessLog, AuditEvent, Hospital
from records.services.patients import register_patient

pytestmark = pytest.mark.django_db


def test_bad_password_is_401_and_audited(hospitals):
    client = APIClient()
    r = client.post(reverse('hospital_login'), {'username': 'Hospital1', 'password': 'nope'}, format='json')
    assert r.status_code == 401
    assert r.data == {'ok': False, 'message': 'Invalid credentials'}
    r = client.post(reverse('hospital_login'), {'username': 'Nobody', 'password': 'Hospital1'}, format='json')
    assert r.status_code == 401
    assert AuditEvent.objects.filter(action='hospital_login', detail__result='fail').count() == 2
    assert client.get(reverse('hospital_session')).data == {'authenticated': False}


def test_passwords_are_stored_hashed(hospitals):
    h1, _ = hospitals
    assert h1.password_hash != 'Hospital1'
    assert h1.check_password('Hospital1')
    assert not h1.check_password('hospital1')


def test_login_ignores_identity_fields_in_body(hospitals):
    client = APIClient()
    r = client.post(reverse('hospital_login'), {
        'username': 'Hospital2', 'password': 'Hospital2', 'hospitalName': 'Hospital1',
    }, format='json')
    assert r.status_code == 200
    assert r.data['hospital']['name'] == 'Hospital2'


def test_search_uses_session_hospital_not_body(hospitals, hospital_client):
    h1, _ = hospitals
    alice = register_patient(patient_name='Alice', problem_desc='chronic back pain after a fall',
                             access_data='Hospital1', contact_no='555-0100')
    client = hospital_client('Hospital2', 'Hospital2')
    r = client.post(reverse('hospital_search'), {
        'query': 'back', 'hospitalId': str(h1.id), 'hospitalName': 'Hospital1',
    }, format='json')
    assert r.status_code == 200
    row = r.data['results'][0]
    assert row['allowed'] is False
    assert row['name'] == 'Access Denied'
    log = AccessLog.objects.get(patient=alice)
    assert log.hospital.name == 'Hospital2'


def test_renamed_hospital_is_checked_by_current_name(hospitals, hospital_client):
    h1, h2 = hospitals
    register_patient(patient_name='Alice', problem_desc='chronic back pain after a fall',
                     access_data='Hospital1', contact_no='555-0100')
    client = hospital_client('Hospital2', 'Hospital2')
    Hospital.objects.filter(id=h1.id).update(name='Hospital1Old')
    Hospital.objects.filter(id=h2.id).update(name='Hospital1')
    r = client.post(reverse('hospital_search'), {'query': 'back'}, format='json')
    assert r.data['results'][0]['allowed'] is True


def test_unexpected_error_is_generic_500(hospitals, monkeypatch, hospital_client):
    client = hospital_client('Hospital1', 'Hospital1')

    def boom(query, hospital):
        raise RuntimeError('postgres://admin:secret@db/records')
    monkeypatch.setattr('records.views.hospitals.search', boom)

    r = client.post(reverse('hospital_search'), {'query': 'back'}, format='json')
    assert r.status_code == 500
    assert r.data['message'] == 'Internal server error'
    assert 'secret' not in r.content.decode()


def test_storage_failure_is_generic_500(hospitals, monkeypatch, hospital_client):
    register_patient(patient_name='Alice', problem_desc='chronic back pain after a fall',
                     access_data='Hospital1', contact_no='555-0100')
    client = hospital_client('Hospital1', 'Hospital1')

    def broken(**kw):
        raise DatabaseError('no such table: records_accesslog')
    monkeypatch.setattr('records.services.store.create_access_log', broken)

    r = client.post(reverse('hospital_search'), {'query': 'back'}, format='json')
    assert r.status_code == 500
    assert r.data['error']['code'] == 'storage_error'
    assert 'records_accesslog' not in r.content.decode()


def test_registration_strips_markup(db):
    client = APIClient()
    r = client.post(reverse('patient_register'), {
        'patientName': '<script>alert(1)</script>Eve',
        'problemDesc': 'persistent cough<img src=x onerror=alert(1)> for weeks',
        'accessData': 'Hospital1',
    }, format='json')
    assert r.status_code == 201
    login = client.post(reverse('patient_login'), {'patientId': r.data['patientId']}, format='json')
    patient = login.data['patient']
    assert '<' not in patient['patientName']
    assert patient['problemDesc'] == 'persistent cough for weeks'


def test_init_is_forbidden_in_prod(settings, db):
    settings.ENV = 'prod'
    r = APIClient().post(reverse('init_hospitals'), format='json')
    assert r.status_code == 403
    assert Hospital.objects.count() == 0


def test_init_creates_default_hospitals_once(settings, db):
    settings.DEFAULT_HOSPITALS = ['Hospital1', 'Hospital2']
    client = APIClient()
    r = client.post(reverse('init_hospitals'), format='json')
    assert r.status_code == 200
    assert r.data['created'] == ['Hospital1', 'Hospital2']
    r = client.post(reverse('init_hospitals'), format='json')
    assert r.data['created'] == []
    assert Hospital.objects.count() == 2
