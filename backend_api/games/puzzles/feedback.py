from __future__ import annotations

import re
from typing import Dict, List, Literal

LetterFeedback = Literal["correct", "present", "absent"]

MASK_CHAR = "_"
_MASKABLE = re.compile(r"[A-Za-z0-9]")


def normalize_word(value: str) -> str:
    """Normalize a word or letter for comparison (trimmed, upper case)."""
    return (value or "").strip().upper()


# PUBLIC_INTERFACE
def compute_letter_feedback(target: str, guess: str) -> List[LetterFeedback]:
    """Compute per-letter feedback with Wordle rules.

    - correct: correct letter in correct position
    - present: letter exists in target but different position (respect counts)
    - absent: letter not in target or already satisfied by count

    Both strings must already be normalized and of equal length.
    """
    t = list(target)
    g = list(guess)
    n = len(t)
    result: List[LetterFeedback] = ["absent"] * n

    # First pass: mark corrects; only unmatched target letters stay available
    remaining_counts: Dict[str, int] = {}
    for i in range(n):
        if g[i] == t[i]:
            result[i] = "correct"
        else:
            remaining_counts[t[i]] = remaining_counts.get(t[i], 0) + 1

    # Second pass: present where an unconsumed letter remains
    for i in range(n):
        if result[i] == "correct":
            continue
        ch = g[i]
        if remaining_counts.get(ch, 0) > 0:
            result[i] = "present"
            remaining_counts[ch] -= 1

    return result


# PUBLIC_INTERFACE
def mask_answer(answer: str) -> str:
    """Replace letters and digits with the mask character, keep the rest.

    >>> mask_answer("King David!")
    '____ _____!'
    """
    return _MASKABLE.sub(MASK_CHAR, answer or "")


# PUBLIC_INTERFACE
def letter_positions(answer: str, letter: str) -> List[int]:
    """Zero-based indexes where ``letter`` occurs in ``answer``, case-insensitive."""
    target = normalize_word(letter)
    return [i for i, ch in enumerate(answer.upper()) if ch == target]
