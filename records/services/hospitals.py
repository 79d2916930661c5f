from typing import Iterable, List, Tuple

from django.conf import settings
from django.db import transaction

from records.models import Hospital
from records.services import store


def default_hospital_names() -> List[str]:
    return [n.strip() for n in settings.DEFAULT_HOSPITALS if n.strip()]


@transaction.atomic
def ensure_hospitals(names: Iterable[str]) -> List[Tuple[Hospital, bool]]:
    """Create any missing hospital accounts (username and password = name).

    Existing accounts are left untouched, so this is safe to run repeatedly.
    """
    out = []
    for name in names:
        hospital = store.get_hospital_by_username(name)
        created = hospital is None
        if created:
            hospital = store.create_hospital(name=name, username=name, password=name)
        out.append((hospital, created))
    return out
