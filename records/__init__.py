"""Records application for the SecureHealth backend.

This package contains models, services, serializers, views and route
registrations for patient profiles, hospital access and the reward
ledger.
"""
