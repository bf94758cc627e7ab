from ..conf import games_setting
from .backends import LocalPreviewBackend, ServiceBackend
from .debounce import Debouncer
from .lifecycle import GameLifecycle, InvalidTransition

__all__ = ["Debouncer", "GameLifecycle", "InvalidTransition", "LocalPreviewBackend", "ServiceBackend", "open_session"]


# PUBLIC_INTERFACE
def open_session(user_id, game_id, on_complete=None, backend=None, **kwargs) -> GameLifecycle:
    """Build a GameLifecycle with timings from ``settings.GAMES``."""
    kwargs.setdefault("debounce_secs", games_setting("PROGRESS_DEBOUNCE_MS") / 1000.0)
    kwargs.setdefault("completion_delay_secs", games_setting("COMPLETION_DELAY_SECS"))
    return GameLifecycle(backend or ServiceBackend(), user_id, game_id, on_complete=on_complete, **kwargs)
