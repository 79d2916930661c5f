"""
The authenticated hospital as seen by views and services.

DRF loads the authentication, permission and throttle classes from
settings while ``rest_framework.views`` is still importing, so this
module must not import anything from DRF views or from ``records.services``.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class HospitalIdentity:
    """The authenticated caller, resolved server side from the session."""
    id: object
    name: str
    username: str = ''

    is_authenticated = True

    @classmethod
    def from_hospital(cls, hospital) -> 'HospitalIdentity':
        return cls(id=hospital.id, name=hospital.name, username=hospital.username)
