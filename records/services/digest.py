"""Integrity digest for patient profiles (the "blockchain hash").

There is no chain here: the digest is a SHA-256 over a canonical JSON
snapshot of the profile, prefixed with ``0x``.
"""
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Optional

DIGEST_PREFIX = '0x'
_EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


@dataclass(frozen=True)
class DigestRecord:
    patient_id: str
    patient_name: str
    age: Optional[int]
    problem_desc: Optional[str]
    profile_date: datetime
    access_data: Optional[str]
    gender: Optional[str]

    @classmethod
    def from_patient(cls, patient) -> 'DigestRecord':
        return cls(
            patient_id=str(patient.id),
            patient_name=patient.patient_name or '',
            age=patient.age,
            problem_desc=patient.problem_desc,
            profile_date=patient.profile_date,
            access_data=patient.access_data,
            gender=patient.gender,
        )


def _iso_millis(value: datetime) -> str:
    # 2024-05-01T08:30:00.123Z
    value = value.astimezone(dt_timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f"{value.microsecond // 1000:03d}Z"


def _epoch_millis(value: datetime) -> int:
    return (value - _EPOCH) // timedelta(milliseconds=1)


def canonical_payload(record: DigestRecord) -> str:
    data = {
        'patientId': record.patient_id,
        'patientName': record.patient_name,
        'age': record.age,
        'problemDesc': record.problem_desc,
        'profileDate': _iso_millis(record.profile_date),
        'accessData': record.access_data,
        'gender': record.gender,
        'timestamp': _epoch_millis(record.profile_date),
    }
    return json.dumps(data, separators=(',', ':'), ensure_ascii=False)


def compute_digest(record: DigestRecord) -> str:
    raw = hashlib.sha256(canonical_payload(record).encode('utf-8')).hexdigest()
    return f"{DIGEST_PREFIX}{raw}"


def verify_digest(record: DigestRecord, digest: str) -> bool:
    return compute_digest(record) == digest
