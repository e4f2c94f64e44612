import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

from .config import settings
from .controller import QuizController

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Quiz controllers keyed by the session cookie, dropped after a timeout."""

    def __init__(
        self,
        timeout_minutes: int = settings.SESSION_TIMEOUT_MINUTES,
        controller_factory: Callable[[], QuizController] = QuizController,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.timeout = timedelta(minutes=timeout_minutes)
        self.controller_factory = controller_factory
        self.now = now
        self._sessions: Dict[str, Tuple[datetime, QuizController]] = {}

    def __len__(self):
        return len(self._sessions)

    def create(self) -> Tuple[str, QuizController]:
        session_id = str(uuid.uuid4())
        controller = self.controller_factory()
        self._sessions[session_id] = (self.now(), controller)
        logger.info(f"New session: {session_id}")
        return session_id, controller

    def get(self, session_id: Optional[str]) -> Optional[QuizController]:
        if not session_id or session_id not in self._sessions:
            return None
        last_seen, controller = self._sessions[session_id]
        if self.now() - last_seen > self.timeout:
            del self._sessions[session_id]
            logger.info(f"Session expired: {session_id}")
            return None
        self._sessions[session_id] = (self.now(), controller)
        # Let a due advancement happen before anyone reads the state
        controller.tick()
        return controller

    def drop(self, session_id: Optional[str]) -> bool:
        return self._sessions.pop(session_id, None) is not None
