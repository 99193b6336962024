# engine/state.py
import logging
from typing import Any, Mapping

from ..data_model import ApplicationState, default_state
from .reducer import Action, ActionType, reduce
from .storage import dumps_snapshot, load_snapshot, save_snapshot

logger = logging.getLogger(__name__)


class SessionState:
    """Holds the one active application state and persists every change."""

    def __init__(self, storage_path: str | None = None):
        self.storage_path = storage_path
        self.state: ApplicationState = default_state()
        if storage_path:
            payload = load_snapshot(storage_path)
            if payload:
                self.state = reduce(self.state, Action(ActionType.LOAD_SNAPSHOT, payload))
                logger.info("Loaded session snapshot from %s", storage_path)

    def dispatch(self, action: Action | Mapping[str, Any]) -> ApplicationState:
        new_state = reduce(self.state, action)
        if new_state is not self.state:
            self.state = new_state
            self._save()
        return self.state

    def reset(self) -> ApplicationState:
        return self.dispatch(Action(ActionType.RESET))

    def export_json(self) -> str:
        return dumps_snapshot(self.state)

    def _save(self) -> None:
        if self.storage_path:
            save_snapshot(self.storage_path, self.state)
