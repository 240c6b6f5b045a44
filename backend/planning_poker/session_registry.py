import logging
import threading
from contextlib import nullcontext
from typing import Dict, Optional

from planning_poker.models import Session, generate_session_key

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Process-wide mapping of session key -> Session.

    Only creation, lookup and deletion happen here; the contents of a
    Session are mutated by the services while holding ``session.lock``.
    Bound to an application with ``init_app`` like the other extensions,
    which also gives every app a fresh store.
    """

    def __init__(self, app=None):
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()
        self.key_length = 8
        self.default_timer = 15
        self.unsure_vote = '?'
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        with self._lock:
            self._sessions = {}
        self.key_length = int(app.config.get('SESSION_KEY_LENGTH', 8))
        self.default_timer = int(app.config.get('DEFAULT_TIMER_DURATION_SEC', 15))
        self.unsure_vote = app.config.get('UNSURE_VOTE', '?')
        app.extensions['session_registry'] = self

    def create(self, facilitator_name) -> str:
        with self._lock:
            key = generate_session_key(self.key_length)
            while key in self._sessions:
                logger.warning(f"Session key collision detected, regenerating: {key}")
                key = generate_session_key(self.key_length)
            self._sessions[key] = Session(
                id=key,
                facilitator=facilitator_name,
                timer_duration=self.default_timer,
            )
        logger.info(f"[session-created] session={key} facilitator={facilitator_name!r}")
        return key

    def get(self, session_key) -> Optional[Session]:
        if not isinstance(session_key, str):
            return None
        return self._sessions.get(session_key)

    def delete(self, session_key) -> None:
        with self._lock:
            removed = self._sessions.pop(session_key, None)
        if removed is not None:
            logger.info(f"[session-deleted] session={session_key}")

    def locked(self, session_key):
        """Context manager serializing work on one session.

        Unknown keys get a no-op context; the operation itself reports the
        missing session.
        """
        session = self.get(session_key)
        return session.lock if session is not None else nullcontext()

    def __contains__(self, session_key):
        return self.get(session_key) is not None

    def __len__(self):
        return len(self._sessions)
