from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from . import crossword, scoring, wordsearch
from .exceptions import ConfigurationError, GuessValidationError
from .feedback import compute_letter_feedback, letter_positions, mask_answer, normalize_word
from .shuffling import shuffle_connections, shuffled

CONNECTIONS_GROUPS = 4
CONNECTIONS_GROUP_SIZE = 4
MATCH_PAIRS_PER_GAME = 6


class Engine(Protocol):
    """Protocol for puzzle engines.

    Every game type implements the same capability set: pick content for a
    player, derive what the client may see, check one guess, and turn a
    finished attempt into trusted scoring facts.
    """

    game_type: str
    max_mistakes: Optional[int]

    # PUBLIC_INTERFACE
    def select(self, variants: Sequence[Any], rng: random.Random) -> Tuple[List[int], Dict[str, Any]]:
        """Return (chosen variant indexes, assigned content)."""

    # PUBLIC_INTERFACE
    def client_data(self, content: Mapping[str, Any], rng: random.Random) -> Dict[str, Any]:
        """Client-safe view of the assigned content."""

    # PUBLIC_INTERFACE
    def check(self, content: Mapping[str, Any], guess: Any) -> Dict[str, Any]:
        """Check one guess; returns the minimum the UI needs."""

    # PUBLIC_INTERFACE
    def derive_facts(
        self, content: Mapping[str, Any], mistakes: int, submission_data: Mapping[str, Any]
    ) -> Tuple[int, Dict[str, Any]]:
        """Recompute (mistakes, facts) for scoring from a submission."""


class BaseEngine:
    """Shared selection and scoring plumbing.

    ``subset_size`` of None means "one variant per player"; an integer makes
    this a bank game that deals that many items from the pool.
    """

    game_type = ""
    scoring_key = ""
    subset_size: Optional[int] = None
    min_subset_size = 1
    max_mistakes: Optional[int] = None

    def select(self, variants: Sequence[Any], rng: random.Random) -> Tuple[List[int], Dict[str, Any]]:
        if not variants:
            raise ConfigurationError()
        if self.subset_size is None:
            index = rng.randrange(len(variants))
            return [index], self.prepare(variants[index])
        size = min(self.subset_size, len(variants))
        if size < self.min_subset_size:
            raise ConfigurationError(
                f"{self.game_type} needs at least {self.min_subset_size} items, found {len(variants)}."
            )
        indexes = sorted(rng.sample(range(len(variants)), size))
        return indexes, self.prepare_bank([variants[i] for i in indexes])

    def prepare(self, variant: Any) -> Dict[str, Any]:
        raise NotImplementedError

    def prepare_bank(self, items: List[Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def score(self, time_taken_secs: int, mistakes: int, facts: Mapping[str, Any]) -> int:
        return scoring.calculate_score(self.scoring_key or self.game_type, time_taken_secs, mistakes, facts)

    def reveal(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        """Solution shown once the attempt is finished (review mode)."""
        return dict(content)


def _require_mapping(variant: Any, game_type: str) -> Mapping[str, Any]:
    if not isinstance(variant, Mapping):
        raise ConfigurationError(f"Malformed {game_type} variant.")
    return variant


def _string_list(value: Any, name: str) -> List[str]:
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise GuessValidationError(f"{name} must be a list of strings.")
    return list(value)


def _submitted_strings(submission_data: Mapping[str, Any], key: str) -> List[str]:
    """Strings listed under `key`; anything that is not a list counts as empty."""
    value = submission_data.get(key)
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def _clamp_mistakes(mistakes: Any) -> int:
    try:
        return max(0, int(mistakes or 0))
    except (TypeError, ValueError):
        return 0


@dataclass
class WordleEngine(BaseEngine):
    """Classic word-guess with per-letter feedback."""

    game_type = "wordle"
    scoring_key = "wordle"
    max_mistakes = scoring.WORDLE_MAX_GUESSES

    def prepare(self, variant: Any) -> Dict[str, Any]:
        if isinstance(variant, Mapping):
            variant = variant.get("solution") or variant.get("word")
        solution = normalize_word(variant if isinstance(variant, str) else "")
        if not solution or not solution.isalpha():
            raise ConfigurationError("Wordle solution must be a non-empty alphabetic word.")
        return {"solution": solution}

    def client_data(self, content, rng):
        return {"wordLength": len(content["solution"])}

    # PUBLIC_INTERFACE
    def check(self, content, guess):
        """Evaluate a full-length guess using Wordle feedback."""
        solution = content["solution"]
        guess_n = normalize_word(guess if isinstance(guess, str) else "")
        if not guess_n.isalpha():
            raise GuessValidationError("Guess must be a non-empty alphabetic string.")
        if len(guess_n) != len(solution):
            raise GuessValidationError(f"Guess length must be {len(solution)} characters.")
        result = compute_letter_feedback(solution, guess_n)
        return {"correct": guess_n == solution, "result": result}

    def derive_facts(self, content, mistakes, submission_data):
        guesses = submission_data.get("guesses")
        if not isinstance(guesses, list):
            return scoring.WORDLE_MAX_GUESSES, {"solved": False}
        solution = content["solution"]
        played = [normalize_word(g) for g in guesses if isinstance(g, str) and g.strip()]
        solved = solution in played
        if solved:
            played = played[: played.index(solution) + 1]
        wrong = sum(1 for g in played if g != solution)
        if not solved:
            wrong = max(wrong, scoring.WORDLE_MAX_GUESSES)
        return wrong, {"solved": solved}


@dataclass
class ConnectionsEngine(BaseEngine):
    """Four groups of four; the bank holds one category per variant."""

    game_type = "connections"
    scoring_key = "connections"
    subset_size = CONNECTIONS_GROUPS
    min_subset_size = CONNECTIONS_GROUPS
    max_mistakes = 4

    def _category(self, variant: Any) -> Dict[str, Any]:
        variant = _require_mapping(variant, self.game_type)
        name = str(variant.get("name") or "").strip()
        words = [str(w).strip() for w in variant.get("words") or [] if str(w).strip()]
        if not name or len(words) != CONNECTIONS_GROUP_SIZE:
            raise ConfigurationError(f"Connections category {name!r} must have a name and four words.")
        return {"name": name, "words": words}

    def prepare_bank(self, items):
        categories = [self._category(item) for item in items]
        all_words = [normalize_word(w) for cat in categories for w in cat["words"]]
        if len(set(all_words)) != len(all_words):
            raise ConfigurationError("Connections words must be unique across the chosen categories.")
        return {"categories": categories}

    def client_data(self, content, rng):
        categories = [cat["words"] for cat in content["categories"]]
        words = [w for cat in categories for w in cat]
        return {"words": shuffle_connections(words, categories, rng=rng)}

    def _find(self, content, name_or_words) -> Optional[Dict[str, Any]]:
        for category in content["categories"]:
            if isinstance(name_or_words, str):
                if category["name"].lower() == name_or_words.strip().lower():
                    return category
            elif {normalize_word(w) for w in category["words"]} == name_or_words:
                return category
        return None

    # PUBLIC_INTERFACE
    def check(self, content, guess):
        """Check a selection of four words; the group is named only when correct."""
        selection = {normalize_word(w) for w in _string_list(guess, "Selection")}
        if len(selection) != CONNECTIONS_GROUP_SIZE:
            raise GuessValidationError("Select exactly four different words.")
        known = {normalize_word(w) for cat in content["categories"] for w in cat["words"]}
        if not selection <= known:
            raise GuessValidationError("Selection contains words that are not in this puzzle.")
        category = self._find(content, selection)
        if category is None:
            return {"correct": False}
        return {"correct": True, "category": category["name"], "words": list(category["words"])}

    def derive_facts(self, content, mistakes, submission_data):
        found = _submitted_strings(submission_data, "foundGroups")
        names = {
            cat["name"]
            for cat in (self._find(content, n) for n in found)
            if cat is not None
        }
        return _clamp_mistakes(mistakes), {"categoriesFound": len(names)}


@dataclass
class CrosswordEngine(BaseEngine):
    """Crossword: the client gets topology and clues, never letters."""

    game_type = "crossword"
    scoring_key = "crossword"

    def _layout(self, content) -> crossword.CrosswordLayout:
        return crossword.CrosswordLayout.from_puzzle(content)

    def prepare(self, variant):
        variant = _require_mapping(variant, self.game_type)
        layout = self._layout(variant)
        layout.solution_grid()
        return {
            "rows": layout.rows,
            "cols": layout.cols,
            "acrossClues": [dict(c.to_client_dict(), answer=c.answer) for c in layout.clue_lists[crossword.ACROSS]],
            "downClues": [dict(c.to_client_dict(), answer=c.answer) for c in layout.clue_lists[crossword.DOWN]],
        }

    def client_data(self, content, rng):
        return self._layout(content).client_view()

    # PUBLIC_INTERFACE
    def check(self, content, guess):
        """Whole-grid check; answers only whether the grid is solved."""
        layout = self._layout(content)
        grid = crossword.normalize_grid(layout, guess)
        return {"correct": crossword.grid_matches(layout, layout.solution_grid(), grid)}

    def derive_facts(self, content, mistakes, submission_data):
        layout = self._layout(content)
        total = layout.total_cells
        try:
            grid = crossword.normalize_grid(layout, submission_data.get("grid"))
        except GuessValidationError:
            return total, {"correctCells": 0, "totalCells": total}
        correct = crossword.count_correct_cells(layout, layout.solution_grid(), grid)
        return total - correct, {"correctCells": correct, "totalCells": total}

    def reveal(self, content):
        return {"solution": self._layout(content).solution_grid()}


@dataclass
class MatchTheWordEngine(BaseEngine):
    """Pair each word with its match; the bank holds one pair per variant."""

    game_type = "match_the_word"
    scoring_key = "match_the_word"
    subset_size = MATCH_PAIRS_PER_GAME
    min_subset_size = 2
    max_mistakes = 5

    def _pair(self, variant: Any) -> Dict[str, str]:
        variant = _require_mapping(variant, self.game_type)
        word = str(variant.get("word") or "").strip()
        match = str(variant.get("match") or "").strip()
        if not word or not match:
            raise ConfigurationError("Match-the-word pairs need a word and a match.")
        return {"word": word, "match": match}

    def prepare_bank(self, items):
        pairs = [self._pair(item) for item in items]
        if len({p["word"] for p in pairs}) != len(pairs) or len({p["match"] for p in pairs}) != len(pairs):
            raise ConfigurationError("Match-the-word words and matches must be unique.")
        return {"pairs": pairs}

    def client_data(self, content, rng):
        pairs = content["pairs"]
        return {
            "words": shuffled([p["word"] for p in pairs], rng),
            "matches": shuffled([p["match"] for p in pairs], rng),
        }

    # PUBLIC_INTERFACE
    def check(self, content, guess):
        if not isinstance(guess, Mapping):
            raise GuessValidationError("Guess must contain a word and a match.")
        word = str(guess.get("word") or "").strip()
        match = str(guess.get("match") or "").strip()
        pairs = content["pairs"]
        if word not in {p["word"] for p in pairs} or match not in {p["match"] for p in pairs}:
            raise GuessValidationError("Word or match is not part of this puzzle.")
        return {"correct": {"word": word, "match": match} in pairs}

    def derive_facts(self, content, mistakes, submission_data):
        words = {p["word"] for p in content["pairs"]}
        found = {w for w in _submitted_strings(submission_data, "foundPairs") if w in words}
        return _clamp_mistakes(mistakes), {"foundPairsCount": len(found)}


@dataclass
class VerseScrambleEngine(BaseEngine):
    """Put the words of a verse back in order."""

    game_type = "verse_scramble"
    scoring_key = "verse_scramble"

    @staticmethod
    def tokens(content) -> List[str]:
        return content["verse"].split()

    def prepare(self, variant):
        variant = _require_mapping(variant, self.game_type)
        verse = " ".join(str(variant.get("verse") or "").split())
        if not verse:
            raise ConfigurationError("Verse scramble needs verse text.")
        return {"verse": verse, "reference": str(variant.get("reference") or "").strip()}

    def client_data(self, content, rng):
        tokens = self.tokens(content)
        scrambled = shuffled(tokens, rng)
        # Distinct token lists can always be scrambled away from the answer
        for _ in range(10):
            if scrambled != tokens or len(set(tokens)) < 2:
                break
            scrambled = shuffled(tokens, rng)
        return {"scrambledWords": scrambled, "wordCount": len(tokens)}

    # PUBLIC_INTERFACE
    def check(self, content, guess):
        """Whole-ordering check; no hint about which words are misplaced."""
        order = _string_list(guess, "Order")
        tokens = self.tokens(content)
        if Counter(order) != Counter(tokens):
            raise GuessValidationError("Order must use every scrambled word exactly once.")
        return {"correct": order == tokens}

    def derive_facts(self, content, mistakes, submission_data):
        order = submission_data.get("order")
        completed = isinstance(order, list) and order == self.tokens(content)
        return _clamp_mistakes(mistakes), {"completed": completed}


@dataclass
class WhoAmIEngine(BaseEngine):
    """Letter-by-letter guessing of a hidden name."""

    game_type = "who_am_i"
    scoring_key = "who_am_i"
    max_mistakes = scoring.WHO_AM_I_MAX_MISTAKES

    def prepare(self, variant):
        if isinstance(variant, str):
            variant = {"answer": variant}
        variant = _require_mapping(variant, self.game_type)
        answer = " ".join(str(variant.get("answer") or "").split()).upper()
        if not mask_answer(answer).count("_"):
            raise ConfigurationError("Who-am-I answer needs at least one letter.")
        return {"answer": answer, "hint": str(variant.get("hint") or "").strip()}

    def client_data(self, content, rng):
        answer = content["answer"]
        return {"maskedAnswer": mask_answer(answer), "wordLength": len(answer), "hint": content["hint"]}

    # PUBLIC_INTERFACE
    def check(self, content, guess):
        """Return every position of the guessed letter, or correct=False."""
        letter = normalize_word(guess if isinstance(guess, str) else "")
        if len(letter) != 1 or not letter.isalnum():
            raise GuessValidationError("Guess a single letter.")
        positions = letter_positions(content["answer"], letter)
        return {"correct": bool(positions), "positions": positions}

    def derive_facts(self, content, mistakes, submission_data):
        guessed = submission_data.get("guessedLetters")
        if not isinstance(guessed, list):
            return _clamp_mistakes(mistakes), {"solved": False}
        answer = content["answer"]
        guessed_set = {normalize_word(g) for g in guessed if isinstance(g, str)}
        needed = {ch for ch, masked in zip(answer, mask_answer(answer)) if masked == "_"}
        wrong = len({g for g in guessed_set if g and g not in answer})
        solved = needed <= guessed_set and wrong < scoring.WHO_AM_I_MAX_MISTAKES
        return wrong, {"solved": solved}


@dataclass
class WordSearchEngine(BaseEngine):
    """Find the listed words in a letter grid."""

    game_type = "word_search"
    scoring_key = "word_search"

    def prepare(self, variant):
        variant = _require_mapping(variant, self.game_type)
        grid = variant.get("grid") or []
        if not grid or not all(isinstance(row, list) and len(row) == len(grid[0]) for row in grid):
            raise ConfigurationError("Word search grid must be a non-empty rectangle.")
        words = [normalize_word(w) for w in variant.get("words") or [] if str(w).strip()]
        if not words:
            raise ConfigurationError("Word search needs at least one word.")
        return {"grid": [[normalize_word(str(ch)) for ch in row] for row in grid], "words": words}

    def client_data(self, content, rng):
        return {"grid": content["grid"], "words": content["words"]}

    @staticmethod
    def _cell(value: Any, name: str) -> wordsearch.Cell:
        try:
            return wordsearch.Cell(int(value["row"]), int(value["col"]))
        except (KeyError, TypeError, ValueError):
            raise GuessValidationError(f"{name} must have integer row and col.")

    # PUBLIC_INTERFACE
    def check(self, content, guess):
        """Check a straight selection from start to end, read either way."""
        if not isinstance(guess, Mapping):
            raise GuessValidationError("Guess must contain a start and an end cell.")
        start = self._cell(guess.get("start"), "start")
        end = self._cell(guess.get("end"), "end")
        candidate, cells = wordsearch.read_line(content["grid"], start, end)
        word = wordsearch.match_word(candidate, content["words"])
        if word is None:
            return {"correct": False}
        return {"correct": True, "word": word, "cells": [c.to_dict() for c in cells]}

    def derive_facts(self, content, mistakes, submission_data):
        words = set(content["words"])
        found = {normalize_word(w) for w in _submitted_strings(submission_data, "foundWords")}
        return _clamp_mistakes(mistakes), {"wordsFound": len(found & words), "totalWords": len(words)}
