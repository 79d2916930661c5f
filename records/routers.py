"""
URL mappings for the SecureHealth API.

Paths mirror the ones the front-end calls.  Trailing slashes are
deliberately omitted (``APPEND_SLASH = False``).
"""
from django.urls import path, include

from .auth_views import hospital_login_view, hospital_logout_view, hospital_session_view
from .views import health
from .views.hospitals import hospital_search, init_hospitals, list_hospitals
from .views.patients import (
    patient_access_logs,
    patient_login,
    patient_lookup,
    patient_register,
    patient_verify,
)


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Bootstrap (dev only)
    path('api/init', init_hospitals, name='init_hospitals'),
    # Patients
    path('api/patient/register', patient_register, name='patient_register'),
    path('api/patient/login', patient_login, name='patient_login'),
    path('api/patient/lookup', patient_lookup, name='patient_lookup'),
    path('api/patient/<str:patient_id>/access-logs', patient_access_logs, name='patient_access_logs'),
    path('api/patient/<str:patient_id>/verify', patient_verify, name='patient_verify'),
    # Hospitals
    path('api/hospitals', list_hospitals, name='list_hospitals'),
    path('api/hospital/login', hospital_login_view, name='hospital_login'),
    path('api/hospital/logout', hospital_logout_view, name='hospital_logout'),
    path('api/hospital/session', hospital_session_view, name='hospital_session'),
    path('api/hospital/search', hospital_search, name='hospital_search'),
]
