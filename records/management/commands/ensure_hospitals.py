# records/management/commands/ensure_hospitals.py
from django.core.management.base import BaseCommand, CommandError

from records.services.hospitals import default_hospital_names, ensure_hospitals


class Command(BaseCommand):
    help = "Ensure the default hospital accounts exist, password = name (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument('names', nargs='*', help='Hospital names (default: DEFAULT_HOSPITALS setting)')

    def handle(self, *args, **opts):
        names = opts['names'] or default_hospital_names()
        bad = [n for n in names if not n or any(c.isspace() for c in n)]
        if bad:
            # access grants are space separated, so names cannot contain spaces
            raise CommandError(f"invalid hospital names: {bad}")
        for hospital, created in ensure_hospitals(names):
            state = "created" if created else "exists"
            self.stdout.write(self.style.SUCCESS(f"ok: {hospital.name} ({state})"))
        self.stdout.write(self.style.SUCCESS("All hospitals ensured."))
