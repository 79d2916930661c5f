"""
Rate limits.  Rates live in ``REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']``.
"""
from rest_framework.throttling import AnonRateThrottle, SimpleRateThrottle

from records.identity import HospitalIdentity


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


class PatientWriteThrottle(AnonRateThrottle):
    scope = 'patient_write'


class HospitalRateThrottle(SimpleRateThrottle):
    """Per hospital when logged in, per client IP otherwise."""
    scope = 'hospital'

    def get_cache_key(self, request, view):
        user = getattr(request, 'user', None)
        if isinstance(user, HospitalIdentity):
            ident = str(user.id)
        else:
            ident = self.get_ident(request)
        return self.cache_format % {'scope': self.scope, 'ident': ident}
