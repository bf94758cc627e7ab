"""Scoring formulas, one per game type.

Every function here is pure: it maps the trusted facts of a finished attempt
to a non-negative integer. Both the authoritative submission path and the
local preview path call into this module so the two can never disagree.

Facts keys used by ``calculate_score``:

- connections: ``categoriesFound``
- crossword: ``correctCells``, ``totalCells``
- match_the_word: ``foundPairsCount``
- verse_scramble: ``completed``
- who_am_i: ``solved``
- word_search: ``wordsFound``, ``totalWords``
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, Mapping

WORDLE_MAX_GUESSES = 6
WHO_AM_I_MAX_MISTAKES = 6


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _time_bonus(time_taken_secs: int, allowance: int, step_secs: int) -> int:
    """``max(0, allowance - floor(time / step))``; negative time counts as zero."""
    return max(0, allowance - max(0, int(time_taken_secs)) // step_secs)


# PUBLIC_INTERFACE
def score_wordle(mistakes: int) -> int:
    """``(6 - mistakes) * 10``; zero once all six guesses are used up."""
    mistakes = max(0, int(mistakes))
    if mistakes >= WORDLE_MAX_GUESSES:
        return 0
    return (WORDLE_MAX_GUESSES - mistakes) * 10


# PUBLIC_INTERFACE
def score_connections(categories_found: int, mistakes: int) -> int:
    return max(0, int(categories_found) * 20 - max(0, int(mistakes)) * 5)


# PUBLIC_INTERFACE
def score_crossword(correct_cells: int, total_cells: int, time_taken_secs: int) -> int:
    """Accuracy worth up to 70 plus a time bonus of up to 30 (one point per minute)."""
    accuracy = 0
    if total_cells > 0:
        correct = min(max(0, int(correct_cells)), int(total_cells))
        accuracy = _round_half_up(correct / total_cells * 70)
    return accuracy + _time_bonus(time_taken_secs, 30, 60)


# PUBLIC_INTERFACE
def score_match_the_word(found_pairs: int, mistakes: int) -> int:
    return max(0, int(found_pairs) * 20 - max(0, int(mistakes)) * 10)


# PUBLIC_INTERFACE
def score_verse_scramble(completed: bool, mistakes: int, time_taken_secs: int) -> int:
    if not completed:
        return 0
    mistake_bonus = max(0, 30 - max(0, int(mistakes)) * 5)
    return 50 + mistake_bonus + _time_bonus(time_taken_secs, 20, 10)


# PUBLIC_INTERFACE
def score_who_am_i(solved: bool, mistakes: int, time_taken_secs: int) -> int:
    if not solved:
        return 0
    mistake_bonus = max(0, WHO_AM_I_MAX_MISTAKES - max(0, int(mistakes))) * 5
    return 50 + mistake_bonus + _time_bonus(time_taken_secs, 20, 15)


# PUBLIC_INTERFACE
def score_word_search(words_found: int, total_words: int, time_taken_secs: int) -> int:
    words_found = max(0, int(words_found))
    all_found_bonus = 20 if total_words > 0 and words_found >= total_words else 0
    return words_found * 10 + all_found_bonus + _time_bonus(time_taken_secs, 30, 20)


_FORMULAS: Dict[str, Callable[[int, int, Mapping[str, Any]], int]] = {
    "wordle": lambda t, m, f: score_wordle(m),
    "connections": lambda t, m, f: score_connections(f.get("categoriesFound", 0), m),
    "crossword": lambda t, m, f: score_crossword(f.get("correctCells", 0), f.get("totalCells", 0), t),
    "match_the_word": lambda t, m, f: score_match_the_word(f.get("foundPairsCount", 0), m),
    "verse_scramble": lambda t, m, f: score_verse_scramble(bool(f.get("completed")), m, t),
    "who_am_i": lambda t, m, f: score_who_am_i(bool(f.get("solved")), m, t),
    "word_search": lambda t, m, f: score_word_search(f.get("wordsFound", 0), f.get("totalWords", 0), t),
}

SCORED_GAME_TYPES = tuple(_FORMULAS)


# PUBLIC_INTERFACE
def calculate_score(
    game_type: str,
    time_taken_secs: int,
    mistakes: int,
    facts: Mapping[str, Any] | None = None,
) -> int:
    """Score a finished attempt.

    ``game_type`` is the scoring family (``wordle`` for all Wordle variants).
    Raises KeyError for an unknown family.
    """
    key = (game_type or "").strip().lower()
    if key not in _FORMULAS:
        raise KeyError(f"No scoring formula for game type: {game_type!r}")
    return _FORMULAS[key](int(time_taken_secs or 0), int(mistakes or 0), facts or {})
