from django.urls import path
from .views import (
    health,
    get_game_types,
    daily_games,
    game_detail,
    game_progress,
    check_answer,
    game_submission,
    submit_game,
    integrity_report,
)

urlpatterns = [
    path('health/', health, name='Health'),
    path('game-types', get_game_types, name='game-types'),
    path('games/daily', daily_games, name='daily-games'),
    path('games/<int:game_id>', game_detail, name='game-detail'),
    path('games/<int:game_id>/progress', game_progress, name='game-progress'),
    path('games/<int:game_id>/check', check_answer, name='check-answer'),
    path('games/<int:game_id>/submission', game_submission, name='game-submission'),
    path('submit', submit_game, name='submit-game'),
    path('integrity-reports', integrity_report, name='integrity-report'),
]
