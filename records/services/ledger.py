"""
Daily reward ledger.

A hospital that is allowed to see a patient's profile credits the
patient ``REWARD_AMOUNT`` at most once per local calendar day.  The claim
is an INSERT into :class:`RewardGrant` guarded by a unique constraint on
(hospital, patient, day), so two concurrent searches cannot both win.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from records.models import Patient, RewardGrant
from records.services import store

logger = logging.getLogger(__name__)


def reward_amount() -> Decimal:
    return Decimal(str(settings.REWARD_AMOUNT)).quantize(Decimal('0.01'))


def today_start() -> datetime:
    """Local midnight of the current day (``TIME_ZONE``)."""
    return timezone.localtime(timezone.now()).replace(hour=0, minute=0, second=0, microsecond=0)


def has_reward_today(hospital_id, patient_id, day_start: datetime) -> bool:
    return store.get_recent_reward_log(hospital_id, patient_id, day_start) is not None


def grant_reward_if_eligible(patient: Patient, hospital_id, day_start: datetime) -> Tuple[Decimal, bool]:
    """Credit the daily reward unless this hospital already paid today.

    Returns ``(revenue, granted)``.  Runs in its own savepoint; when the
    claim loses a race the savepoint is rolled back and nothing changes.
    """
    if has_reward_today(hospital_id, patient.id, day_start):
        return patient.revenue, False
    amount = reward_amount()
    try:
        with transaction.atomic():
            RewardGrant.objects.create(
                hospital_id=hospital_id,
                patient_id=patient.id,
                day=day_start.date(),
                amount=amount,
            )
            revenue = store.update_patient_revenue(patient.id, amount)
    except IntegrityError:
        # another search claimed this day first
        return patient.revenue, False
    patient.revenue = revenue
    logger.info("reward granted: hospital=%s patient=%s amount=%s revenue=%s", hospital_id, patient.id, amount, revenue)
    return revenue, True
