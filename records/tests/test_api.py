"""
Integration tests for the SecureHealth API.

These tests walk the main flows end to end: patient registration and
login, hospital session login, record search with access grants and the
daily reward, and the patient's view of who looked at the profile.  The
tests use Django REST Framework's APIClient within the APITestCase base
class.

To run the tests:

```
pytest -q records/tests
```
"""
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import AccessLog, AuditEvent, Hospital, Patient
from ..services import store


@override_settings(SCORER_ENABLED=False, OPENAI_API_KEY='')
class SecureHealthAPITests(APITestCase):
    def setUp(self) -> None:
        """Create the two default hospitals and one registered patient."""
        self.h1 = store.create_hospital(name='Hospital1', username='Hospital1', password='Hospital1')
        self.h2 = store.create_hospital(name='Hospital2', username='Hospital2', password='Hospital2')
        response = self.client.post(reverse('patient_register'), {
            'patientName': 'Alice',
            'age': 34,
            'gender': 'female',
            'contactNo': '555-0100',
            'address': '1 Main St',
            'problemDesc': 'chronic back pain after a fall',
            'accessData': 'Hospital1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.alice_id = response.data['patientId']
        self.alice_number = response.data['patientNumber']

    def hospital_client(self, username: str) -> APIClient:
        client = APIClient()
        response = client.post(reverse('hospital_login'), {'username': username, 'password': username}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return client

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------
    def test_register_returns_number_and_digest(self):
        self.assertEqual(self.alice_number, 1001)
        patient = Patient.objects.get(id=self.alice_id)
        self.assertTrue(patient.integrity_digest.startswith('0x'))
        self.assertEqual(patient.revenue, Decimal('0.00'))
        self.assertEqual(patient.access_data, 'Hospital1')
        self.assertTrue(AuditEvent.objects.filter(action='patient_register', object_id=self.alice_id).exists())

        response = self.client.post(reverse('patient_register'), {
            'patientName': 'Bob',
            'problemDesc': 'recurring migraine with aura',
            'accessData': ['Hospital1', 'Hospital2', 'Hospital1'],
            'age': '',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['patientNumber'], 1002)
        bob = Patient.objects.get(id=response.data['patientId'])
        self.assertEqual(bob.access_data, 'Hospital1 Hospital2')
        self.assertIsNone(bob.age)

    def test_register_validates_input(self):
        cases = [
            {'patientName': '', 'problemDesc': 'chronic back pain', 'accessData': 'Hospital1'},
            {'patientName': 'Carol', 'problemDesc': 'short', 'accessData': 'Hospital1'},
            {'patientName': 'Carol', 'problemDesc': 'chronic back pain', 'accessData': []},
            {'patientName': 'Carol', 'problemDesc': 'chronic back pain', 'accessData': 'Hospital1', 'age': 200},
        ]
        for body in cases:
            response = self.client.post(reverse('patient_register'), body, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, body)
            self.assertFalse(response.data['ok'])
        self.assertEqual(Patient.objects.count(), 1)

    def test_patient_login_by_number_and_contact(self):
        response = self.client.post(reverse('patient_login'), {
            'patientNumber': str(self.alice_number), 'contactNo': '555-0100',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        patient = response.data['patient']
        self.assertEqual(patient['id'], self.alice_id)
        self.assertEqual(patient['revenue'], '0.00')
        self.assertEqual(patient['display']['address'], '1 Main St')

    def test_patient_login_by_id_and_errors(self):
        response = self.client.post(reverse('patient_login'), {'patientId': self.alice_id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(reverse('patient_login'), {'patientNumber': 'abc', 'contactNo': '555-0100'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid patient number format')

        response = self.client.post(reverse('patient_login'), {'patientNumber': str(self.alice_number),
                                                               'contactNo': '555-9999'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.post(reverse('patient_login'), {'patientId': 'not-a-uuid'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.post(reverse('patient_login'), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patient_lookup(self):
        response = self.client.post(reverse('patient_lookup'), {'patientName': 'Alice', 'contactNo': '555-0100'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['patientId'], self.alice_id)
        self.assertEqual(response.data['patientNumber'], self.alice_number)

        response = self.client.post(reverse('patient_lookup'), {'patientName': 'alice', 'contactNo': '555-0100'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.post(reverse('patient_lookup'), {'patientName': 'Alice'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Patient name and contact number are required')

    def test_verify_detects_tampering(self):
        url = reverse('patient_verify', args=[self.alice_id])
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['valid'])

        Patient.objects.filter(id=self.alice_id).update(problem_desc='something else entirely')
        response = self.client.get(url)
        self.assertFalse(response.data['valid'])

    # ------------------------------------------------------------------
    # Hospitals
    # ------------------------------------------------------------------
    def test_list_hospitals(self):
        response = self.client.get(reverse('list_hospitals'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([h['name'] for h in response.data], ['Hospital1', 'Hospital2'])

    def test_search_flow_with_rewards(self):
        h1 = self.hospital_client('Hospital1')
        response = h1.post(reverse('hospital_search'), {'query': 'back pain'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        row = response.data['results'][0]
        self.assertEqual(row['name'], 'Alice')
        self.assertTrue(row['allowed'])
        self.assertTrue(row['rewardGiven'])
        self.assertEqual(row['revenue'], 0.5)

        response = h1.post(reverse('hospital_search'), {'query': 'back pain'}, format='json')
        row = response.data['results'][0]
        self.assertFalse(row['rewardGiven'])
        self.assertEqual(row['revenue'], 0.5)

        h2 = self.hospital_client('Hospital2')
        response = h2.post(reverse('hospital_search'), {'query': 'back'}, format='json')
        row = response.data['results'][0]
        self.assertFalse(row['allowed'])
        self.assertEqual(row['name'], 'Access Denied')
        self.assertEqual(row['problem'], 'Patient has not granted access to this hospital')
        self.assertIsNone(row['contact'])

        self.assertEqual(Patient.objects.get(id=self.alice_id).revenue, Decimal('0.50'))
        self.assertEqual(AccessLog.objects.count(), 3)

        response = self.client.post(reverse('patient_login'), {'patientId': self.alice_id}, format='json')
        self.assertEqual(response.data['patient']['revenue'], '0.50')

    def test_access_logs_newest_first(self):
        patient = Patient.objects.get(id=self.alice_id)
        now = timezone.now()
        AccessLog.objects.create(patient=patient, hospital=self.h1, allowed=True, reward_given=True,
                                 search_query='back', access_time=now - timedelta(hours=2))
        AccessLog.objects.create(patient=patient, hospital=self.h2, allowed=False, reward_given=False,
                                 search_query='pain', access_time=now - timedelta(hours=1))

        response = self.client.get(reverse('patient_access_logs', args=[self.alice_id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([log['hospitalName'] for log in response.data], ['Hospital2', 'Hospital1'])
        self.assertEqual(response.data[1]['rewardGiven'], True)

        response = self.client.get(reverse('patient_access_logs', args=['00000000-0000-0000-0000-000000000000']))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_search_requires_session(self):
        response = self.client.post(reverse('hospital_search'), {'query': 'back'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(AccessLog.objects.count(), 0)

    def test_search_requires_query(self):
        h1 = self.hospital_client('Hospital1')
        response = h1.post(reverse('hospital_search'), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Search query is required')

    def test_search_rejects_non_object_body(self):
        h1 = self.hospital_client('Hospital1')
        for body in (['back'], 'back', 42):
            response = h1.post(reverse('hospital_search'), body, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, body)
            self.assertFalse(response.data['ok'])
        response = h1.post(reverse('hospital_search'), {'query': None}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Search query is required')
        self.assertEqual(AccessLog.objects.count(), 0)

    def test_login_rotates_session_and_logout_ends_it(self):
        client = APIClient()
        old_key = client.session.session_key
        response = client.post(reverse('hospital_login'), {'username': 'Hospital1', 'password': 'Hospital1'},
                               format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['hospital']['name'], 'Hospital1')
        new_key = client.cookies[settings.SESSION_COOKIE_NAME].value
        self.assertNotEqual(old_key, new_key)

        response = client.get(reverse('hospital_session'))
        self.assertEqual(response.data, {'authenticated': True,
                                         'hospital': {'id': str(self.h1.id), 'name': 'Hospital1'}})

        response = client.post(reverse('hospital_logout'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = client.get(reverse('hospital_session'))
        self.assertEqual(response.data, {'authenticated': False})
        response = client.post(reverse('hospital_search'), {'query': 'back'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(AuditEvent.objects.filter(action='hospital_logout').count(), 1)

    def test_deleted_hospital_loses_session(self):
        h2 = self.hospital_client('Hospital2')
        Hospital.objects.filter(id=self.h2.id).delete()
        response = h2.post(reverse('hospital_search'), {'query': 'back'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_healthz(self):
        response = self.client.get('/healthz')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'ok': True, 'db': True})
