import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from latinquiz.controller import QuizController  # noqa: E402
from latinquiz.database import MemoryStore  # noqa: E402
from latinquiz.models import VocabularyEntry  # noqa: E402
from latinquiz.registry import SessionRegistry  # noqa: E402
from latinquiz.scheduler import DeferredScheduler  # noqa: E402
from latinquiz.vocabulary import VocabularyManager  # noqa: E402


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def entry(headword: str, *answers: str) -> VocabularyEntry:
    return VocabularyEntry(headword=headword, accepted_answers=answers)


SMALL_VOCAB = [
    entry("curare", "verzorgen", "zorgen voor"),
    entry("homo", "mens", "man"),
    entry("via", "weg", "straat"),
    entry("salutare", "begroeten", "groeten", "(be)groeten"),
]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock) -> DeferredScheduler:
    return DeferredScheduler(clock=clock)


@pytest.fixture
def controller(scheduler) -> QuizController:
    return QuizController(scheduler=scheduler, rng=random.Random(42))


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def vocab_manager(store) -> VocabularyManager:
    return VocabularyManager(store)


@pytest.fixture
def small_catalog(tmp_path) -> Path:
    path = tmp_path / "catalog.csv"
    path.write_text(
        "word,translation,chapter\n"
        "curare,verzorgen|zorgen voor,8\n"
        "homo,mens|man,10\n"
        "via,weg|straat,8\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def registry(clock) -> SessionRegistry:
    return SessionRegistry(
        controller_factory=lambda: QuizController(
            scheduler=DeferredScheduler(clock=clock), rng=random.Random(3)
        )
    )
