from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.utils import timezone

from .models import PuzzleDefinition

SAMPLE_PUZZLES: List[Dict[str, Any]] = [
    {
        "title": "Daily Word",
        "game_type": "wordle",
        "variants": [{"solution": "FAITH"}, {"solution": "GRACE"}, {"solution": "PSALM"}],
    },
    {
        "title": "Connections",
        "game_type": "connections",
        "variants": [
            {"name": "Fruits of the Spirit", "words": ["LOVE", "JOY", "PEACE", "PATIENCE"]},
            {"name": "Gospels", "words": ["MATTHEW", "MARK", "LUKE", "JOHN"]},
            {"name": "Plagues of Egypt", "words": ["FROGS", "LOCUSTS", "HAIL", "BOILS"]},
            {"name": "Rivers", "words": ["JORDAN", "NILE", "EUPHRATES", "TIGRIS"]},
            {"name": "Patriarchs", "words": ["ABRAHAM", "ISAAC", "JACOB", "JOSEPH"]},
        ],
    },
    {
        "title": "Mini Crossword",
        "game_type": "crossword",
        "variants": [
            {
                "rows": 4,
                "cols": 5,
                "acrossClues": [
                    {"number": 1, "clue": "The greatest of these", "answer": "LOVE", "row": 0, "col": 0},
                    {"number": 2, "clue": "Bread from heaven", "answer": "MANNA", "row": 2, "col": 0},
                ],
                "downClues": [
                    {"number": 1, "clue": "Young sheep", "answer": "LAMB", "row": 0, "col": 0},
                ],
            }
        ],
    },
    {
        "title": "Match the Word",
        "game_type": "match_the_word",
        "variants": [
            {"word": "David", "match": "Shepherd King"},
            {"word": "Moses", "match": "Lawgiver"},
            {"word": "Noah", "match": "Ark Builder"},
            {"word": "Elijah", "match": "Prophet of Fire"},
            {"word": "Ruth", "match": "Loyal Daughter-in-law"},
            {"word": "Jonah", "match": "Swallowed by a Fish"},
            {"word": "Esther", "match": "Queen of Persia"},
        ],
    },
    {
        "title": "Verse Scramble",
        "game_type": "verse_scramble",
        "variants": [
            {"verse": "In the beginning God created the heaven and the earth", "reference": "Genesis 1:1"},
            {"verse": "The Lord is my shepherd I shall not want", "reference": "Psalm 23:1"},
        ],
    },
    {
        "title": "Who Am I?",
        "game_type": "who_am_i",
        "variants": [
            {"answer": "John the Baptist", "hint": "I prepared the way in the wilderness."},
            {"answer": "Mary Magdalene", "hint": "I was first to see the empty tomb."},
        ],
    },
    {
        "title": "Word Search",
        "game_type": "word_search",
        "variants": [
            {
                "grid": [
                    ["L", "O", "V", "E", "X"],
                    ["F", "A", "I", "T", "H"],
                    ["J", "O", "Y", "Q", "P"],
                    ["K", "H", "O", "P", "E"],
                    ["Z", "W", "N", "M", "R"],
                ],
                "words": ["LOVE", "FAITH", "JOY", "HOPE"],
            }
        ],
    },
]


# PUBLIC_INTERFACE
def ensure_sample_puzzles(day: Optional[date] = None) -> int:
    """Create one sample puzzle per game type for ``day`` (today by default).

    Game types that already have a puzzle that day are skipped, so running
    this twice is safe. Returns the number of puzzles created.
    """
    day = day or timezone.localdate()
    existing = set(PuzzleDefinition.objects.filter(date=day).values_list("game_type", flat=True))
    created = 0
    with transaction.atomic():
        for sample in SAMPLE_PUZZLES:
            if sample["game_type"] in existing:
                continue
            PuzzleDefinition.objects.create(date=day, **sample)
            created += 1
    return created
