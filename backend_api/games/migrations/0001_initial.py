import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


GAME_TYPE_CHOICES = [
    ("wordle", "Wordle"),
    ("wordle_advanced", "Wordle Advanced"),
    ("wordle_bank", "Wordle Bank"),
    ("connections", "Connections"),
    ("crossword", "Crossword"),
    ("match_the_word", "Match The Word"),
    ("verse_scramble", "Verse Scramble"),
    ("who_am_i", "Who Am I"),
    ("word_search", "Word Search"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PuzzleDefinition",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                ("title", models.CharField(blank=True, default="", max_length=128)),
                ("game_type", models.CharField(choices=GAME_TYPE_CHOICES, db_index=True, max_length=32)),
                ("date", models.DateField(db_index=True, default=django.utils.timezone.localdate)),
                ("variants", models.JSONField(default=list, help_text="Interchangeable variants or bank items.")),
            ],
            options={
                "verbose_name": "Puzzle Definition",
                "verbose_name_plural": "Puzzle Definitions",
                "ordering": ["date", "id"],
            },
        ),
        migrations.CreateModel(
            name="PuzzleAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                ("user_id", models.CharField(db_index=True, max_length=64)),
                ("variant_indexes", models.JSONField(default=list, help_text="Indexes into the puzzle's variants.")),
                ("content", models.JSONField(help_text="Assigned solution content. Server-side only.")),
                ("client_data", models.JSONField(help_text="Client-safe derived shape, fixed at assignment time.")),
                (
                    "puzzle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="games.puzzledefinition",
                    ),
                ),
            ],
            options={
                "verbose_name": "Puzzle Assignment",
                "verbose_name_plural": "Puzzle Assignments",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="GameProgress",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                ("user_id", models.CharField(db_index=True, max_length=64)),
                ("state", models.JSONField(default=dict)),
                (
                    "puzzle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="progress",
                        to="games.puzzledefinition",
                    ),
                ),
            ],
            options={
                "verbose_name": "Game Progress",
                "verbose_name_plural": "Game Progress",
                "ordering": ["-updated_at"],
            },
        ),
        migrations.CreateModel(
            name="GameSubmission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                ("user_id", models.CharField(db_index=True, max_length=64)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("time_taken_secs", models.PositiveIntegerField(default=0)),
                ("mistakes", models.PositiveIntegerField(default=0)),
                ("score", models.PositiveIntegerField(default=0)),
                ("submission_data", models.JSONField(blank=True, default=dict)),
                (
                    "puzzle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="submissions",
                        to="games.puzzledefinition",
                    ),
                ),
            ],
            options={
                "verbose_name": "Game Submission",
                "verbose_name_plural": "Game Submissions",
                "ordering": ["-completed_at"],
            },
        ),
        migrations.CreateModel(
            name="IntegrityReport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                ("user_id", models.CharField(db_index=True, max_length=64)),
                (
                    "signal",
                    models.CharField(help_text="Heuristic that fired, e.g. devtools_dimensions.", max_length=64),
                ),
                ("details", models.TextField(blank=True, default="")),
                (
                    "puzzle",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="integrity_reports",
                        to="games.puzzledefinition",
                    ),
                ),
            ],
            options={
                "verbose_name": "Integrity Report",
                "verbose_name_plural": "Integrity Reports",
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="puzzleassignment",
            constraint=models.UniqueConstraint(fields=("user_id", "puzzle"), name="unique_assignment_per_user"),
        ),
        migrations.AddConstraint(
            model_name="gameprogress",
            constraint=models.UniqueConstraint(fields=("user_id", "puzzle"), name="unique_progress_per_user"),
        ),
        migrations.AddConstraint(
            model_name="gamesubmission",
            constraint=models.UniqueConstraint(fields=("user_id", "puzzle"), name="unique_submission_per_user"),
        ),
    ]
