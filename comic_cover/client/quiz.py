"""
Quiz State Collector

Eight fixed questions answered one step at a time. The state machine:

    step in [0, 7]
    next: blocked while the current answer is blank; on the last step
          jumps back to the first unanswered question, or completes
    back: blocked at step 0

Completion persists the whole answer record through the session and
hands off to the selfie flow.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from comic_cover.client.session import SessionContext
from comic_cover.services.errors import InputValidationError
from comic_cover.services.text_processing import sanitize_free_text, is_blank

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Question:
    key: str
    label: str
    type: str = "text"
    placeholder: str = ""
    options: List[str] = field(default_factory=list)


QUESTIONS = [
    Question("gender", "1. What is your gender?", "select", options=["Male", "Female", "Other"]),
    Question("childhood", "2. What word best describes your childhood?",
             placeholder="e.g., Invisible"),
    Question("superpower", "3. If you could awaken one extraordinary power within you, what would it be?",
             placeholder="e.g., Control time"),
    Question("city", "4. If your story began in any city in the world, which one would it be?",
             placeholder="e.g., Dubai"),
    Question("fear", "5. Your enemy is the embodiment of your deepest fear. What form does it take?",
             placeholder="e.g., Disappointing others"),
    Question("fuel", "6. What fuels you to keep going when everything feels impossible?",
             placeholder="e.g., My little sister's smile"),
    Question("strength", "7. How would someone close to you describe your greatest strength?",
             placeholder="e.g., Calm under pressure"),
    Question("lesson", "8. What truth or lesson would you want your story to teach the world?",
             placeholder="e.g., Kindness is not weakness"),
]

QUIZ_KEYS = [q.key for q in QUESTIONS]


class QuizOutcome(str, Enum):
    STAYED = "stayed"
    ADVANCED = "advanced"
    WENT_BACK = "went_back"
    JUMPED_TO_MISSING = "jumped_to_missing"
    COMPLETED = "completed"


class QuizState:
    """Interactive quiz over the fixed question list."""

    def __init__(self, session: SessionContext, questions: Optional[List[Question]] = None):
        self.session = session
        self.questions = questions or QUESTIONS
        self.answers: Dict[str, str] = {q.key: "" for q in self.questions}
        self.step = 0
        self.touched = False
        self.completed = False

    # ===== Progress =====

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Question:
        return self.questions[self.step]

    @property
    def value(self) -> str:
        return self.answers.get(self.current_question.key, "")

    @property
    def is_last_step(self) -> bool:
        return self.step == self.total - 1

    @property
    def progress_percent(self) -> int:
        # Half rounds up: step 1 of 8 shows 13%
        return int((self.step + 1) * 100 / self.total + 0.5)

    def first_missing_index(self) -> Optional[int]:
        for idx, q in enumerate(self.questions):
            if is_blank(self.answers.get(q.key)):
                return idx
        return None

    # ===== Session =====

    def start_new(self) -> None:
        """Begin a fresh run: clear stored answers and reset the form."""
        self.session.create()
        self.answers = {q.key: "" for q in self.questions}
        self.step = 0
        self.touched = False
        self.completed = False

    def prefill(self) -> bool:
        """Load a previously stored answer record into the form."""
        stored = self.session.load_answers()
        if not stored:
            return False
        for key in self.answers:
            if key in stored:
                self.answers[key] = stored[key]
        return True

    # ===== Transitions =====

    def update(self, raw: str) -> str:
        """
        Store an answer for the current step.

        Select answers must be one of the listed options (or empty);
        free text is capped at four words.

        Raises:
            InputValidationError: unknown option for a select question
        """
        q = self.current_question
        if q.type == "select":
            value = raw or ""
            if value and value not in q.options:
                raise InputValidationError(f"'{value}' is not one of: {', '.join(q.options)}")
        else:
            value = sanitize_free_text(raw)

        self.answers[q.key] = value
        self.touched = True
        return value

    def next(self) -> QuizOutcome:
        if is_blank(self.value):
            self.touched = True
            return QuizOutcome.STAYED

        if not self.is_last_step:
            self.step += 1
            self.touched = False
            return QuizOutcome.ADVANCED

        missing = self.first_missing_index()
        if missing is not None:
            logger.info(f"↩️ Quiz incomplete, jumping to '{self.questions[missing].key}'")
            self.step = missing
            self.touched = True
            return QuizOutcome.JUMPED_TO_MISSING

        final = {key: value.strip() for key, value in self.answers.items()}
        self.session.complete_quiz(final)
        self.answers = final
        self.completed = True
        logger.info("✅ Quiz complete, answers saved")
        return QuizOutcome.COMPLETED

    def back(self) -> QuizOutcome:
        if self.step == 0:
            return QuizOutcome.STAYED
        self.step -= 1
        self.touched = False
        return QuizOutcome.WENT_BACK

    def handle_key(self, key: str, shift: bool = False, in_text_input: bool = False) -> Optional[QuizOutcome]:
        """
        Keyboard shortcuts: Enter advances, Shift+Enter or ArrowLeft goes
        back, ArrowRight advances. Ignored while typing in a text input.
        """
        if in_text_input:
            return None
        if key == "Enter" and not shift:
            return self.next()
        if (key == "Enter" and shift) or key == "ArrowLeft":
            return self.back()
        if key == "ArrowRight":
            return self.next()
        return None
