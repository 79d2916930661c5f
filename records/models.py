"""
Database models for the SecureHealth backend.

Patients own their profile and decide which hospitals may see it.
Hospitals search the profiles; every attempt lands in :class:`AccessLog`
and each (hospital, patient, day) can earn the patient at most one
:class:`RewardGrant`.  Field names mirror the JSON keys the front-end
uses (``patientName``, ``problemDesc`` ...) in snake_case.
"""
from __future__ import annotations

import uuid
from decimal import Decimal

from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.utils import timezone


class Hospital(models.Model):
    """A hospital account.

    ``name`` is what patients list in their access grants, ``username``
    is what the hospital logs in with.  Both are unique.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    username = models.CharField(max_length=100, unique=True)
    password_hash = models.CharField(max_length=256)
    created_at = models.DateTimeField(auto_now_add=True)

    def set_password(self, raw_password: str) -> None:
        self.password_hash = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password(raw_password, self.password_hash)

    def __str__(self) -> str:
        return f"{self.name} ({self.username})"


class Patient(models.Model):
    """A patient medical profile.

    ``access_data`` is a space separated list of hospital names allowed
    to see the identifiable part of the profile.  ``revenue`` only ever
    grows, one reward unit at a time.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_number = models.PositiveIntegerField(unique=True)
    patient_name = models.CharField(max_length=200)
    age = models.PositiveIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=20, blank=True, null=True)
    contact_no = models.CharField(max_length=50, blank=True, null=True, db_index=True)
    address = models.TextField(blank=True, null=True)
    problem_desc = models.TextField()
    profile_date = models.DateTimeField(default=timezone.now)
    access_data = models.TextField(blank=True, default='')
    revenue = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    integrity_digest = models.CharField(max_length=256, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(condition=models.Q(revenue__gte=0), name='patient_revenue_non_negative'),
        ]

    @property
    def allowed_hospitals(self) -> list[str]:
        return [n for n in (self.access_data or '').split(' ') if n]

    def __str__(self) -> str:
        return f"#{self.patient_number} {self.patient_name}"


class PatientNumberSequence(models.Model):
    """Single-row counter handing out human friendly patient numbers."""
    name = models.CharField(max_length=32, primary_key=True)
    last_value = models.PositiveIntegerField(default=1000)

    def __str__(self) -> str:
        return f"{self.name}={self.last_value}"


class AccessLog(models.Model):
    """One row per patient considered in a hospital search.  Never updated."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='access_logs')
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='access_logs')
    access_time = models.DateTimeField(default=timezone.now, db_index=True)
    allowed = models.BooleanField()
    reward_given = models.BooleanField(default=False)
    search_query = models.TextField(blank=True, default='')

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'access_time'], name='accesslog_patient_time_idx'),
            models.Index(fields=['hospital', 'patient', 'reward_given', 'access_time'], name='accesslog_reward_lookup_idx'),
        ]

    def __str__(self) -> str:
        return f"log h={self.hospital_id} p={self.patient_id} allowed={self.allowed} reward={self.reward_given}"


class RewardGrant(models.Model):
    """Claim for the daily reward of a (hospital, patient) pair.

    The unique constraint is what makes the grant atomic: only one
    concurrent search can insert the row for a given day.
    """
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='reward_grants')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='reward_grants')
    day = models.DateField()
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    granted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['hospital', 'patient', 'day'], name='one_reward_per_hospital_patient_day'),
        ]

    def __str__(self) -> str:
        return f"reward h={self.hospital_id} p={self.patient_id} {self.day:%F} +{self.amount}"


class AuditEvent(models.Model):
    ACTION_CHOICES = (
        ("hospital_login", "hospital_login"),
        ("hospital_logout", "hospital_logout"),
        ("patient_register", "patient_register"),
        ("hospital_init", "hospital_init"),
    )
    hospital = models.ForeignKey(Hospital, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64, choices=ACTION_CHOICES)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.hospital_id}@{self.created_at:%F %T}"
