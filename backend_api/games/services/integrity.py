from __future__ import annotations

import logging
from typing import Optional

from ..models import IntegrityReport, PuzzleDefinition

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def record_integrity_report(
    user_id: str, signal: str, details: str = "", puzzle: Optional[PuzzleDefinition] = None
) -> IntegrityReport:
    """Store an advisory anti-cheat signal. Scoring never reads these."""
    report = IntegrityReport.objects.create(user_id=user_id, puzzle=puzzle, signal=signal, details=details or "")
    logger.warning(
        "Integrity signal %r from user=%s puzzle=%s", signal, user_id, puzzle.pk if puzzle else None
    )
    return report
