"""Quiz session controller.

One :class:`QuizController` drives one player's runs through the word list:
it owns the shuffled items, the position, the score and the missed words,
asks :mod:`latinquiz.matching` for verdicts and moves between
:class:`~latinquiz.models.QuizState` values.

Moving on to the next word after an answer is resolved is deferred through a
:class:`~latinquiz.scheduler.DeferredScheduler` so the player can read the
feedback first. While that advance is pending the item is closed: any further
``submit`` is rejected with :class:`OutOfSequenceSubmission`.
"""

import logging
import random
from typing import List, MutableSequence, Optional, Sequence, TypeVar

from .config import settings
from .errors import EmptyVocabulary, InvalidSubmission, OutOfSequenceSubmission
from .matching import (
    calculate_grade,
    calculate_percentage,
    check_answer,
    generate_hint,
)
from .models import (
    CheckResult,
    Correct,
    Feedback,
    Hint,
    IncorrectFinal,
    IncorrectWithHint,
    MissedItem,
    QuizResults,
    QuizState,
    Snapshot,
    VocabularyEntry,
)
from .scheduler import DeferredScheduler, ScheduledCall

logger = logging.getLogger(__name__)

T = TypeVar("T")


def shuffle(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Fisher-Yates shuffle of a copy of ``items``."""
    rng = rng or random.Random()
    shuffled: MutableSequence[T] = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return list(shuffled)


def _eligible(entries: Sequence[VocabularyEntry]) -> List[VocabularyEntry]:
    cleaned = []
    for entry in entries:
        answers = tuple(a for a in entry.accepted_answers if a.strip())
        if not entry.headword.strip() or not answers:
            logger.warning(f"Skipping unusable vocabulary entry {entry.headword!r}")
            continue
        cleaned.append(VocabularyEntry(headword=entry.headword, accepted_answers=answers))
    return cleaned


def _points_label(points: float) -> str:
    return f"+{points:g} {'punt' if points == 1 else 'punten'}"


class QuizController:
    def __init__(
        self,
        scheduler: Optional[DeferredScheduler] = None,
        rng: Optional[random.Random] = None,
        correct_delay: float = settings.CORRECT_ADVANCE_DELAY,
        final_wrong_delay: float = settings.FINAL_WRONG_ADVANCE_DELAY,
    ):
        self.scheduler = scheduler or DeferredScheduler()
        self.rng = rng or random.Random()
        self.correct_delay = correct_delay
        self.final_wrong_delay = final_wrong_delay

        self.state = QuizState.NOT_STARTED
        self.items: List[VocabularyEntry] = []
        self.position = 0
        self.score = 0.0
        self.missed: List[MissedItem] = []
        self.hint_consumed = False
        self.hint: Optional[Hint] = None
        self.last_feedback: Optional[Feedback] = None
        self.player_name: Optional[str] = None
        self.target_grade: Optional[float] = None

        self._pending: Optional[ScheduledCall] = None
        self._state_before_manager: Optional[QuizState] = None

    # --- Lifecycle ---
    def start(
        self,
        vocabulary: Sequence[VocabularyEntry],
        player_name: Optional[str] = None,
        target_grade: Optional[float] = None,
    ):
        if not vocabulary:
            raise EmptyVocabulary()
        entries = _eligible(vocabulary)
        if not entries:
            raise EmptyVocabulary()

        self._cancel_pending()
        self.items = shuffle(entries, self.rng)
        self.position = 0
        self.score = 0.0
        self.missed = []
        self.player_name = player_name or None
        self.target_grade = target_grade
        self._state_before_manager = None
        self._reset_item()
        self.state = QuizState.IN_PROGRESS
        logger.info(f"Quiz started with {len(self.items)} words (player: {self.player_name})")

    def restart(
        self,
        vocabulary: Sequence[VocabularyEntry],
        player_name: Optional[str] = None,
        target_grade: Optional[float] = None,
    ):
        self.start(vocabulary, player_name, target_grade)

    def enter_vocabulary_manager(self):
        if self.state not in (QuizState.NOT_STARTED, QuizState.FINISHED):
            raise OutOfSequenceSubmission(
                f"Cannot manage vocabulary while the quiz is {self.state.value}"
            )
        self._state_before_manager = self.state
        self.state = QuizState.MANAGING_VOCABULARY

    def leave_vocabulary_manager(self):
        if self.state != QuizState.MANAGING_VOCABULARY:
            raise OutOfSequenceSubmission("Vocabulary manager is not open")
        self.state = self._state_before_manager or QuizState.NOT_STARTED
        self._state_before_manager = None

    # --- Turn handling ---
    @property
    def current_item(self) -> Optional[VocabularyEntry]:
        if self.state == QuizState.IN_PROGRESS and self.position < len(self.items):
            return self.items[self.position]
        return None

    @property
    def advance_pending(self) -> bool:
        return self._pending is not None

    def tick(self) -> int:
        """Fire a due advancement, if any."""
        return self.scheduler.run_due()

    def submit(self, raw_input: str) -> CheckResult:
        item = self.current_item
        if item is None:
            raise OutOfSequenceSubmission(f"No question to answer (state: {self.state.value})")
        if self._pending is not None:
            raise OutOfSequenceSubmission("This word has already been answered")
        if not raw_input or not raw_input.strip():
            raise InvalidSubmission()

        answers = list(item.accepted_answers)

        if check_answer(raw_input, answers):
            points = 0.5 if self.hint_consumed else 1.0
            self.score += points
            result = Correct(points=points, message=f"✓ Correct! ({_points_label(points)})")
            self.last_feedback = Feedback(correct=True, message=result.message)
            self._schedule_advance(self.correct_delay)
            return result

        if not self.hint_consumed:
            self.hint = generate_hint(answers)
            self.hint_consumed = True
            result = IncorrectWithHint(
                fragment=self.hint.fragment,
                first_letter=self.hint.first_letter,
                full_length=self.hint.full_length,
                message="✗ Niet helemaal... Probeer het nog eens met de hint!",
            )
            self.last_feedback = Feedback(correct=False, message=result.message)
            return result

        self.missed.append(
            MissedItem(headword=item.headword, accepted_answers=answers, user_answer=raw_input)
        )
        result = IncorrectFinal(
            correct_answers=answers,
            user_answer=raw_input,
            message=f"✗ Helaas! Het juiste antwoord was: {', '.join(answers)}",
        )
        self.last_feedback = Feedback(correct=False, message=result.message)
        self._schedule_advance(self.final_wrong_delay)
        return result

    def advance(self):
        """Move past a resolved item. Also used as the scheduled callback."""
        if self.state != QuizState.IN_PROGRESS or self._pending is None:
            raise OutOfSequenceSubmission("Nothing to advance past")
        self._cancel_pending()
        self.position += 1
        if self.position >= len(self.items):
            self.state = QuizState.FINISHED
            logger.info(
                f"Quiz finished: {self.score:g}/{len(self.items)} "
                f"({len(self.missed)} missed, player: {self.player_name})"
            )
        else:
            self._reset_item()

    # --- Projections ---
    def snapshot(self) -> Snapshot:
        total = len(self.items)
        item = self.current_item
        return Snapshot(
            state=self.state,
            prompt_word=item.headword if item else None,
            position=self.position,
            total=total,
            score=self.score,
            progress=(self.position / total * 100) if total else 0.0,
            hint=self.hint,
            last_feedback=self.last_feedback,
            awaiting_final_answer=self.hint_consumed and self._pending is None,
            advance_pending=self._pending is not None,
        )

    @property
    def finished(self) -> bool:
        return bool(self.items) and self.position == len(self.items)

    def results(self) -> QuizResults:
        if not self.finished:
            raise OutOfSequenceSubmission("The quiz is not finished yet")
        total = len(self.items)
        grade = calculate_grade(self.score, total)
        return QuizResults(
            score=self.score,
            total=total,
            percentage=calculate_percentage(self.score, total),
            grade=grade,
            missed=list(self.missed),
            player_name=self.player_name,
            target_grade=self.target_grade,
            target_reached=None if self.target_grade is None else grade >= self.target_grade,
        )

    # --- Internals ---
    def _schedule_advance(self, delay: float):
        self._pending = self.scheduler.call_later(delay, self.advance)

    def _cancel_pending(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _reset_item(self):
        self.hint_consumed = False
        self.hint = None
        self.last_feedback = None
