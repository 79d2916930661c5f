"""
Custom permission classes for hospital access control.
"""
from rest_framework.permissions import BasePermission

from records.identity import HospitalIdentity


class IsHospital(BasePermission):
    """Allow access only to requests authenticated as a hospital."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return isinstance(getattr(request, "user", None), HospitalIdentity)
