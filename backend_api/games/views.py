from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.utils import timezone
from django.utils.dateparse import parse_date
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from . import services
from .models import PuzzleDefinition
from .puzzles import ConfigurationError, EngineRegistry, GuessValidationError, ReviewModeError
from .serializers import (
    CheckAnswerRequestSerializer,
    CheckAnswerResponseSerializer,
    GameDetailResponseSerializer,
    GameSubmissionSerializer,
    GameSummarySerializer,
    IntegrityReportRequestSerializer,
    IntegrityReportSerializer,
    ProgressRequestSerializer,
    ProgressResponseSerializer,
    SubmitGameRequestSerializer,
)

logger = logging.getLogger(__name__)

USER_HEADER = "HTTP_X_USER_ID"

user_header_param = openapi.Parameter(
    "X-User-Id",
    openapi.IN_HEADER,
    type=openapi.TYPE_STRING,
    required=False,
    description="Player id, used when the request is not authenticated.",
)


def _user_id(request) -> Optional[str]:
    """The authenticated user's pk, else the X-User-Id header."""
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return str(user.pk)
    header = (request.META.get(USER_HEADER) or "").strip()
    return header or None


def _missing_user() -> Response:
    return Response({"error": "A user id is required."}, status=status.HTTP_401_UNAUTHORIZED)


def _not_found(message: str = ConfigurationError.default_message) -> Response:
    return Response({"error": message}, status=status.HTTP_404_NOT_FOUND)


def _puzzle(game_id: int) -> Optional[PuzzleDefinition]:
    try:
        return services.get_puzzle(game_id)
    except PuzzleDefinition.DoesNotExist:
        return None


# PUBLIC_INTERFACE
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def health(request):
    """Health check endpoint for the API.

    Returns:
    - 200 OK with {"message": "Server is up!"}
    """
    return Response({"message": "Server is up!"})


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="get_game_types",
    operation_summary="List available game types",
    operation_description="Returns the supported game type identifiers.",
    tags=["meta"],
    responses={200: openapi.Response("OK", schema=openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Items(type=openapi.TYPE_STRING)))},
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def get_game_types(request):
    """List available game types."""
    return Response(list(EngineRegistry.game_types()), status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="daily_games",
    operation_summary="List the day's games",
    operation_description="""
Returns the puzzles scheduled for a day (today by default). Only metadata is
listed; open a game to get its assigned content.

Query params:
- date (optional, YYYY-MM-DD)
""",
    manual_parameters=[
        openapi.Parameter("date", openapi.IN_QUERY, type=openapi.TYPE_STRING, format=openapi.FORMAT_DATE, required=False),
    ],
    responses={200: GameSummarySerializer(many=True)},
    tags=["game"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def daily_games(request):
    """List the daily rotation."""
    raw = (request.GET.get("date") or "").strip()
    day: Optional[date] = parse_date(raw) if raw else timezone.localdate()
    if day is None:
        return Response({"error": "date must be YYYY-MM-DD."}, status=status.HTTP_400_BAD_REQUEST)
    qs = PuzzleDefinition.objects.filter(date=day).order_by("id")
    return Response(GameSummarySerializer(qs, many=True).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="game_detail",
    operation_summary="Open a game",
    operation_description="""
Resolve the caller's assignment for a game, creating it on first access, and
return the client-safe data. The same user always gets the same instance.

Once the user has submitted, the response also carries the stored
submission and the solution for review.

Errors:
- 404 "No puzzle available." when the game has no usable variants
""",
    manual_parameters=[user_header_param],
    responses={200: GameDetailResponseSerializer},
    tags=["game"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def game_detail(request, game_id: int):
    """Return the caller's assigned game."""
    user_id = _user_id(request)
    if user_id is None:
        return _missing_user()
    puzzle = _puzzle(game_id)
    if puzzle is None:
        return _not_found("Game not found.")
    try:
        payload = services.client_safe_game(user_id, puzzle)
    except ConfigurationError as e:
        logger.error("Game %s is not playable: %s", game_id, e)
        return _not_found(str(e))

    submission = services.get_submission(user_id, puzzle)
    payload["submission"] = GameSubmissionSerializer(submission).data if submission else None
    payload["solution"] = services.review_payload(user_id, puzzle) if submission else None
    return Response(payload, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="load_progress",
    operation_summary="Load saved progress",
    manual_parameters=[user_header_param],
    responses={200: ProgressResponseSerializer},
    tags=["progress"],
)
@swagger_auto_schema(
    method="put",
    operation_id="save_progress",
    operation_summary="Save progress",
    operation_description="""
Upsert the in-progress state snapshot. Solution-bearing keys (solution,
answer, verse, categories, pairs, ...) are dropped before storing. Saves for
a game the user already submitted are ignored.
""",
    manual_parameters=[user_header_param],
    request_body=ProgressRequestSerializer,
    responses={204: "Saved"},
    tags=["progress"],
)
@swagger_auto_schema(
    method="delete",
    operation_id="clear_progress",
    operation_summary="Clear saved progress",
    manual_parameters=[user_header_param],
    responses={204: "Cleared"},
    tags=["progress"],
)
@api_view(["GET", "PUT", "DELETE"])
@permission_classes([permissions.AllowAny])
def game_progress(request, game_id: int):
    """Load, save or clear the caller's progress for a game."""
    user_id = _user_id(request)
    if user_id is None:
        return _missing_user()
    puzzle = _puzzle(game_id)
    if puzzle is None:
        return _not_found("Game not found.")

    if request.method == "GET":
        state = services.load_progress(user_id, puzzle)
        return Response(ProgressResponseSerializer({"state": state}).data, status=status.HTTP_200_OK)

    if request.method == "DELETE":
        services.clear_progress(user_id, puzzle)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ProgressRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    services.save_progress(user_id, puzzle, serializer.validated_data["state"])
    return Response(status=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="check_answer",
    operation_summary="Check a guess",
    operation_description="""
Check one guess against the caller's assigned solution.

Request body:
- guess: word, letter, word list, pair, selection or grid depending on type

Response:
- correct (bool), plus per-type fields: result (wordle), positions
  (who_am_i), category/words (connections), word/cells (word_search)

A malformed guess returns 400 and never counts as a mistake. Once the
game is submitted it is read-only and checks return 409.
""",
    manual_parameters=[user_header_param],
    request_body=CheckAnswerRequestSerializer,
    responses={200: CheckAnswerResponseSerializer, 409: "Game already submitted"},
    tags=["game"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def check_answer(request, game_id: int):
    """Verify a guess server-side; the solution never leaves the server."""
    user_id = _user_id(request)
    if user_id is None:
        return _missing_user()
    puzzle = _puzzle(game_id)
    if puzzle is None:
        return _not_found("Game not found.")
    serializer = CheckAnswerRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    try:
        result = services.check_answer(user_id, puzzle, serializer.validated_data["guess"])
    except ConfigurationError as e:
        return _not_found(str(e))
    except GuessValidationError as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except ReviewModeError as e:
        return Response({"error": str(e)}, status=status.HTTP_409_CONFLICT)
    return Response(result, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="game_submission",
    operation_summary="Get the caller's submission",
    manual_parameters=[user_header_param],
    responses={200: openapi.Response("Submission or null", GameSubmissionSerializer)},
    tags=["game"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def game_submission(request, game_id: int):
    """Return the stored submission, or null if the game is unfinished."""
    user_id = _user_id(request)
    if user_id is None:
        return _missing_user()
    puzzle = _puzzle(game_id)
    if puzzle is None:
        return _not_found("Game not found.")
    submission = services.get_submission(user_id, puzzle)
    data = GameSubmissionSerializer(submission).data if submission else None
    return Response({"submission": data}, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="submit_game",
    operation_summary="Submit a finished game",
    operation_description="""
Record a finished attempt. The server recomputes mistakes and score from
submissionData against the caller's assignment; a client score is ignored.

A repeat submission replaces the stored one only if its score is strictly
higher. Progress for the game is cleared.

Request body:
- gameId (int), startedAt (datetime, optional), timeTakenSeconds (int)
- mistakes (int, optional), submissionData (object)

Response: the stored submission (201 when created, 200 otherwise).
""",
    manual_parameters=[user_header_param],
    request_body=SubmitGameRequestSerializer,
    responses={201: GameSubmissionSerializer, 200: GameSubmissionSerializer},
    tags=["game"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def submit_game(request):
    """Score and store a finished attempt."""
    user_id = _user_id(request)
    if user_id is None:
        return _missing_user()
    serializer = SubmitGameRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data
    try:
        outcome = services.submit_game(
            user_id,
            vd["puzzle"],
            time_taken_secs=vd["timeTakenSeconds"],
            mistakes=vd.get("mistakes", 0),
            submission_data=vd.get("submissionData") or {},
            started_at=vd.get("startedAt"),
        )
    except ConfigurationError as e:
        return _not_found(str(e))
    code = status.HTTP_201_CREATED if outcome.created else status.HTTP_200_OK
    return Response(GameSubmissionSerializer(outcome.submission).data, status=code)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="integrity_report",
    operation_summary="Report an integrity signal",
    operation_description="Advisory only: stored for review, never affects scoring.",
    manual_parameters=[user_header_param],
    request_body=IntegrityReportRequestSerializer,
    responses={201: IntegrityReportSerializer},
    tags=["meta"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def integrity_report(request):
    """Store a client-side anti-cheat heuristic hit."""
    user_id = _user_id(request)
    if user_id is None:
        return _missing_user()
    serializer = IntegrityReportRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data
    report = services.record_integrity_report(user_id, vd["signal"], vd.get("details", ""), vd.get("puzzle"))
    return Response(IntegrityReportSerializer(report).data, status=status.HTTP_201_CREATED)
