from django.core.management.base import BaseCommand
from django.db.models import Exists, OuterRef

from games.models import GameProgress, GameSubmission


class Command(BaseCommand):
    help = "Delete saved progress for games the user has already submitted."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Report stale rows without deleting them.")

    def handle(self, *args, **options):
        submitted = GameSubmission.objects.filter(user_id=OuterRef("user_id"), puzzle=OuterRef("puzzle"))
        stale = GameProgress.objects.filter(Exists(submitted))
        count = stale.count()
        if options["dry_run"]:
            self.stdout.write(f"Would delete {count} stale progress rows.")
            return
        stale.delete()
        self.stdout.write(self.style.SUCCESS(f"Deleted {count} stale progress rows."))
