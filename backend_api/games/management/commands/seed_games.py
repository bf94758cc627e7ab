from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from games.seed_data import ensure_sample_puzzles


class Command(BaseCommand):
    help = "Seed one sample puzzle of every game type for a date (default: today)."

    def add_arguments(self, parser):
        parser.add_argument("--date", help="Day to seed, YYYY-MM-DD.")

    def handle(self, *args, **options):
        # PUBLIC_INTERFACE
        # This command is idempotent and safe to run multiple times.
        day = None
        if options.get("date"):
            day = parse_date(options["date"])
            if day is None:
                raise CommandError("--date must be YYYY-MM-DD.")
        created = ensure_sample_puzzles(day)
        if created == 0:
            self.stdout.write(self.style.WARNING("Sample puzzles already present. No action taken."))
            return
        self.stdout.write(self.style.SUCCESS(f"Seeded {created} puzzles."))
