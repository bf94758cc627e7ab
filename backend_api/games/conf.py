from __future__ import annotations

from typing import Any

from django.conf import settings

DEFAULTS = {
    # Quiet period before an in-progress state snapshot is written.
    "PROGRESS_DEBOUNCE_MS": 1000,
    # Delay between a finished game and the completion callback.
    "COMPLETION_DELAY_SECS": 2.5,
}


# PUBLIC_INTERFACE
def games_setting(name: str) -> Any:
    """Read a key from ``settings.GAMES``, falling back to DEFAULTS."""
    overrides = getattr(settings, "GAMES", None) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
