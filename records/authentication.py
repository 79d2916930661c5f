"""
Session based authentication for hospital accounts.

Hospitals are not Django users: a successful login stores the hospital
id in the Django session and this class turns it back into a
:class:`~records.identity.HospitalIdentity` on every request.
The hospital row is reloaded each time so a renamed or deleted account
takes effect immediately.  Keeping it apart from the views avoids
circular imports when DRF loads authentication classes from settings.
"""
from __future__ import annotations

from rest_framework import authentication

from records.identity import HospitalIdentity
from records.services import store

SESSION_HOSPITAL_ID = 'hospitalId'
SESSION_HOSPITAL_NAME = 'hospitalName'


class HospitalSessionAuthentication(authentication.SessionAuthentication):
    """Authenticate a hospital from the session cookie.

    CSRF is enforced the same way DRF does for Django users.  Returning a
    ``WWW-Authenticate`` value makes DRF answer 401 instead of 403.
    """

    def authenticate(self, request):
        session = getattr(request._request, 'session', None)
        hospital_id = session.get(SESSION_HOSPITAL_ID) if session is not None else None
        if not hospital_id:
            return None
        hospital = store.get_hospital(hospital_id)
        if hospital is None:
            session.flush()
            return None
        self.enforce_csrf(request)
        return (HospitalIdentity.from_hospital(hospital), None)

    def authenticate_header(self, request):
        return 'Session'


def login_hospital(request, hospital) -> None:
    """Bind the session to ``hospital`` under a fresh session key."""
    session = request.session
    session.cycle_key()
    session[SESSION_HOSPITAL_ID] = str(hospital.id)
    session[SESSION_HOSPITAL_NAME] = hospital.name


def logout_hospital(request) -> None:
    request.session.flush()
