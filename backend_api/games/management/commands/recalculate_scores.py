import logging

from django.core.management.base import BaseCommand

from games.models import GameSubmission
from games.services import recalculate_submission

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Re-derive scoring facts and scores for stored submissions."

    def add_arguments(self, parser):
        parser.add_argument("--game", type=int, help="Only submissions for this game id.")
        parser.add_argument("--user", help="Only submissions by this user id.")
        parser.add_argument("--dry-run", action="store_true", help="Report changes without saving them.")

    def handle(self, *args, **options):
        qs = GameSubmission.objects.select_related("puzzle").order_by("id")
        if options.get("game"):
            qs = qs.filter(puzzle_id=options["game"])
        if options.get("user"):
            qs = qs.filter(user_id=options["user"])

        dry_run = options["dry_run"]
        changed = 0
        for submission in qs:
            old, new = recalculate_submission(submission, save=not dry_run)
            if old != new:
                changed += 1
                logger.info("Submission %s score %s -> %s", submission.pk, old, new)
                self.stdout.write(f"Submission {submission.pk} ({submission.user_id}): {old} -> {new}")

        verb = "Would update" if dry_run else "Updated"
        self.stdout.write(self.style.SUCCESS(f"{verb} {changed} of {qs.count()} submissions."))
