from enum import Enum
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class QuizState(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    FINISHED = "finished"
    MANAGING_VOCABULARY = "vocab-manager"


class VocabularyEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    headword: str
    accepted_answers: Tuple[str, ...]

    @property
    def is_quizzable(self) -> bool:
        return bool(self.headword.strip()) and any(
            answer.strip() for answer in self.accepted_answers
        )


class VocabularyListing(BaseModel):
    headword: str
    accepted_answers: List[str]
    is_custom: bool


class Hint(BaseModel):
    fragment: str
    first_letter: str
    full_length: int


class MissedItem(BaseModel):
    headword: str
    accepted_answers: List[str]
    user_answer: str


# --- Check results ---
class Correct(BaseModel):
    kind: Literal["correct"] = "correct"
    points: float
    message: str


class IncorrectWithHint(BaseModel):
    kind: Literal["incorrect_with_hint"] = "incorrect_with_hint"
    fragment: str
    first_letter: str
    full_length: int
    message: str


class IncorrectFinal(BaseModel):
    kind: Literal["incorrect_final"] = "incorrect_final"
    correct_answers: List[str]
    user_answer: str
    message: str


CheckResult = Union[Correct, IncorrectWithHint, IncorrectFinal]


class Feedback(BaseModel):
    correct: bool
    message: str


class Snapshot(BaseModel):
    """What the question screen needs to render one turn."""

    state: QuizState
    prompt_word: Optional[str] = None
    position: int = 0
    total: int = 0
    score: float = 0.0
    progress: float = 0.0
    hint: Optional[Hint] = None
    last_feedback: Optional[Feedback] = None
    awaiting_final_answer: bool = False
    advance_pending: bool = False


class QuizResults(BaseModel):
    score: float
    total: int
    percentage: float
    grade: float
    missed: List[MissedItem] = Field(default_factory=list)
    player_name: Optional[str] = None
    target_grade: Optional[float] = None
    target_reached: Optional[bool] = None
