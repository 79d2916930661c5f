"""
Hospital search over patient condition descriptions.

For each patient whose condition text contains the query the pipeline
decides whether the searching hospital was granted access, pays the
patient's daily reward when it was, records the attempt in the access
log, scores relevance and redacts what the hospital may not see.  Rows
come back sorted by relevance; ties keep patient-number order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db import DatabaseError, transaction
from rest_framework.exceptions import ValidationError

from records.exceptions import StorageFailure
from records.identity import HospitalIdentity
from records.models import Patient
from records.services import ledger, store
from records.services.relevance import score_relevance

logger = logging.getLogger(__name__)

DENIED_NAME = 'Access Denied'
DENIED_PROBLEM = 'Patient has not granted access to this hospital'


@dataclass
class ResultRow:
    id: str
    name: str
    age: Optional[int]
    gender: Optional[str]
    contact: Optional[str]
    problem: str
    allowed: bool
    reward_given: bool
    revenue: float
    relevance_score: int
    matched_terms: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'age': self.age,
            'gender': self.gender,
            'contact': self.contact,
            'problem': self.problem,
            'allowed': self.allowed,
            'rewardGiven': self.reward_given,
            'revenue': self.revenue,
            'relevanceScore': self.relevance_score,
            'matchedTerms': self.matched_terms,
        }


@dataclass
class SearchOutcome:
    results: list[ResultRow]
    query: str

    def as_dict(self) -> dict:
        return {'results': [r.as_dict() for r in self.results], 'query': self.query}


def is_access_allowed(patient: Patient, hospital_name: str) -> bool:
    if not patient.access_data:
        return False
    return hospital_name in patient.access_data.split(' ')


def record_access(patient: Patient, hospital: HospitalIdentity, query: str, day_start: datetime) -> tuple[bool, bool]:
    """Reward (when allowed) and log one access as a single unit of work.

    Returns ``(allowed, reward_given)``.  A failed reward write is rolled
    back and logged, and the access is still recorded without reward.  A
    failed log write rolls back the whole unit, reward included.
    """
    allowed = is_access_allowed(patient, hospital.name)
    revenue_before = patient.revenue
    try:
        with transaction.atomic():
            reward_given = False
            if allowed:
                try:
                    with transaction.atomic():
                        _, reward_given = ledger.grant_reward_if_eligible(patient, hospital.id, day_start)
                except DatabaseError:
                    logger.exception("reward write failed: hospital=%s patient=%s", hospital.id, patient.id)
                    patient.revenue = revenue_before
                    reward_given = False
            store.create_access_log(
                patient_id=patient.id,
                hospital_id=hospital.id,
                allowed=allowed,
                reward_given=reward_given,
                search_query=query,
            )
    except DatabaseError as e:
        patient.revenue = revenue_before
        logger.exception("access log write failed: hospital=%s patient=%s", hospital.id, patient.id)
        raise StorageFailure() from e
    return allowed, reward_given


def build_row(patient: Patient, *, allowed: bool, reward_given: bool, score: int, matched_terms: list[str]) -> ResultRow:
    if allowed:
        return ResultRow(
            id=str(patient.id),
            name=patient.patient_name,
            age=patient.age,
            gender=patient.gender,
            contact=patient.contact_no,
            problem=patient.problem_desc,
            allowed=True,
            reward_given=reward_given,
            revenue=float(patient.revenue or Decimal('0')),
            relevance_score=score,
            matched_terms=matched_terms,
        )
    return ResultRow(
        id=str(patient.id),
        name=DENIED_NAME,
        age=None,
        gender=None,
        contact=None,
        problem=DENIED_PROBLEM,
        allowed=False,
        reward_given=False,
        revenue=0.0,
        relevance_score=score,
        matched_terms=[],
    )


def rank(rows: list[ResultRow]) -> list[ResultRow]:
    # list.sort is stable: equal scores keep candidate order
    return sorted(rows, key=lambda r: r.relevance_score, reverse=True)


def search(query, hospital: HospitalIdentity) -> SearchOutcome:
    if not isinstance(query, str) or not query:
        raise ValidationError({'query': 'Search query is required'})

    try:
        candidates = list(store.search_patients_by_condition(query))
    except DatabaseError as e:
        logger.exception("candidate lookup failed for hospital=%s", hospital.id)
        raise StorageFailure() from e

    day_start = ledger.today_start()
    rows: list[ResultRow] = []
    for patient in candidates:
        allowed, reward_given = record_access(patient, hospital, query, day_start)
        relevance = score_relevance(query, patient.problem_desc)
        rows.append(build_row(
            patient,
            allowed=allowed,
            reward_given=reward_given,
            score=relevance.score,
            matched_terms=relevance.matched_terms,
        ))

    logger.info("search by hospital=%s matched %d patients", hospital.id, len(rows))
    return SearchOutcome(results=rank(rows), query=query)
