import os
from typing import Optional

from fastapi.templating import Jinja2Templates

from .database import SQLiteStore
from .registry import SessionRegistry
from .vocabulary import VocabularyManager

PACKAGE_DIR = os.path.dirname(__file__)
TEMPLATES_DIR = os.path.join(PACKAGE_DIR, "templates")
STATIC_DIR = os.path.join(PACKAGE_DIR, "static")

templates = Jinja2Templates(directory=TEMPLATES_DIR)
session_registry = SessionRegistry()

_vocab_manager: Optional[VocabularyManager] = None


def get_vocab_manager() -> VocabularyManager:
    global _vocab_manager
    if _vocab_manager is None:
        _vocab_manager = VocabularyManager(SQLiteStore())
    return _vocab_manager


def get_session_registry() -> SessionRegistry:
    return session_registry
