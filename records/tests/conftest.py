import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from records.services import store


@pytest.fixture(autouse=True)
def offline_scorer_and_clean_throttles(settings):
    """Keep tests off the network and reset rate-limit counters."""
    settings.SCORER_ENABLED = False
    settings.OPENAI_API_KEY = ''
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def hospitals(db):
    h1 = store.create_hospital(name='Hospital1', username='Hospital1', password='Hospital1')
    h2 = store.create_hospital(name='Hospital2', username='Hospital2', password='Hospital2')
    return h1, h2


@pytest.fixture
def hospital_client(db):
    """Factory returning an APIClient holding a logged-in hospital session."""
    def login(username, password):
        client = APIClient()
        r = client.post('/api/hospital/login', {'username': username, 'password': password}, format='json')
        assert r.status_code == 200, r.data
        return client
    return login
