from __future__ import annotations

from typing import Any, Dict

from rest_framework import serializers

from .models import GameSubmission, IntegrityReport, PuzzleDefinition
from .puzzles import EngineRegistry


# PUBLIC_INTERFACE
class GameSummarySerializer(serializers.ModelSerializer):
    """Listing entry for the daily rotation; carries no puzzle content."""

    type = serializers.CharField(source="game_type")

    class Meta:
        model = PuzzleDefinition
        fields = ["id", "title", "type", "date"]


# PUBLIC_INTERFACE
class GameSubmissionSerializer(serializers.ModelSerializer):
    """A stored submission in the client's camelCase shape."""

    gameId = serializers.IntegerField(source="puzzle_id", read_only=True)
    userId = serializers.CharField(source="user_id", read_only=True)
    startedAt = serializers.DateTimeField(source="started_at", allow_null=True, read_only=True)
    completedAt = serializers.DateTimeField(source="completed_at", read_only=True)
    timeTakenSeconds = serializers.IntegerField(source="time_taken_secs", read_only=True)
    submissionData = serializers.JSONField(source="submission_data", read_only=True)

    class Meta:
        model = GameSubmission
        fields = [
            "id",
            "gameId",
            "userId",
            "startedAt",
            "completedAt",
            "timeTakenSeconds",
            "mistakes",
            "score",
            "submissionData",
        ]
        read_only_fields = ["mistakes", "score"]


# PUBLIC_INTERFACE
class GameDetailResponseSerializer(serializers.Serializer):
    """Client-safe game payload.

    Fields:
    - id, title, type, date: puzzle metadata
    - maxMistakes: mistakes allowed before the game is lost (null if unbounded)
    - data: the assignment's client data (never the solution)
    - submission: the user's stored submission, or null
    - solution: revealed only once a submission exists
    """

    id = serializers.IntegerField()
    title = serializers.CharField(allow_blank=True)
    type = serializers.ChoiceField(choices=EngineRegistry.game_types())
    date = serializers.DateField()
    maxMistakes = serializers.IntegerField(allow_null=True)
    data = serializers.DictField()
    submission = GameSubmissionSerializer(allow_null=True, required=False)
    solution = serializers.DictField(allow_null=True, required=False)


# PUBLIC_INTERFACE
class ProgressRequestSerializer(serializers.Serializer):
    """Request payload to save in-progress state."""

    state = serializers.DictField(help_text="Opaque UI state snapshot.")


# PUBLIC_INTERFACE
class ProgressResponseSerializer(serializers.Serializer):
    state = serializers.DictField(allow_null=True)


# PUBLIC_INTERFACE
class CheckAnswerRequestSerializer(serializers.Serializer):
    """Request payload to check one guess.

    The guess shape depends on the game type: a word (wordle), a letter
    (who_am_i), a list of words (connections, verse_scramble), a pair
    (match_the_word), a start/end selection (word_search) or a whole grid
    (crossword).
    """

    guess = serializers.JSONField()

    def validate_guess(self, value):
        if value is None or value == "":
            raise serializers.ValidationError("Guess is required.")
        return value


# PUBLIC_INTERFACE
class CheckAnswerResponseSerializer(serializers.Serializer):
    correct = serializers.BooleanField()
    result = serializers.ListField(
        child=serializers.ChoiceField(choices=["correct", "present", "absent"]), required=False
    )
    positions = serializers.ListField(child=serializers.IntegerField(), required=False)
    category = serializers.CharField(required=False)
    words = serializers.ListField(child=serializers.CharField(), required=False)
    word = serializers.CharField(required=False)
    cells = serializers.ListField(child=serializers.DictField(), required=False)


# PUBLIC_INTERFACE
class SubmitGameRequestSerializer(serializers.Serializer):
    """Request payload to record a finished attempt.

    Any ``score`` sent by the client is ignored; the server recomputes it.
    """

    gameId = serializers.IntegerField()
    startedAt = serializers.DateTimeField(required=False, allow_null=True)
    timeTakenSeconds = serializers.IntegerField(min_value=0)
    mistakes = serializers.IntegerField(min_value=0, required=False, default=0)
    submissionData = serializers.DictField(required=False, default=dict)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        try:
            attrs["puzzle"] = PuzzleDefinition.objects.get(pk=attrs["gameId"])
        except PuzzleDefinition.DoesNotExist:
            raise serializers.ValidationError({"gameId": "Game not found."})
        return attrs


# PUBLIC_INTERFACE
class IntegrityReportRequestSerializer(serializers.Serializer):
    """Advisory signal reported by a client, e.g. devtools detection."""

    gameId = serializers.IntegerField(required=False, allow_null=True)
    signal = serializers.CharField(max_length=64)
    details = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        game_id = attrs.get("gameId")
        attrs["puzzle"] = PuzzleDefinition.objects.filter(pk=game_id).first() if game_id else None
        return attrs


# PUBLIC_INTERFACE
class IntegrityReportSerializer(serializers.ModelSerializer):
    gameId = serializers.IntegerField(source="puzzle_id", allow_null=True, read_only=True)

    class Meta:
        model = IntegrityReport
        fields = ["id", "gameId", "signal", "details", "created_at"]
