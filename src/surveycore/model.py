"""
Core Survey Model Objects

Defines the aggregate that operators edit and publish:
    - Options (labeled choices)
    - Questions (ordered, validated option lists)
    - SurveyPeriod (the submission window)
    - Survey (aggregate root and lifecycle state machine)

ARCHITECTURAL RULE:
    Survey is the only root.
    Questions, Options and the Period have no identity of their own.
    They are addressed by position or by text, never by surrogate key,
    and they are only ever changed through a Survey operation.

LIFECYCLE:
    Draft -> Published -> Closed
    Strictly forward. Closed is terminal.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from surveycore.errors import (
    DuplicateQuestionError,
    EmptySurveyError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    InvalidStateError,
    InvalidStructureError,
)


MIN_OPTIONS_PER_QUESTION = 2


def utcnow() -> datetime:
    """Return the current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _require_text(value, what: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{what} cannot be null or empty.")
    return value.strip()


def _require_order(order) -> int:
    if not isinstance(order, int) or isinstance(order, bool):
        raise InvalidArgumentError(f"Order must be an integer, got {order!r}.")
    if order < 0:
        raise InvalidArgumentError("Order cannot be negative.")
    return order


class SurveyStatus(Enum):
    """Lifecycle states of a Survey."""

    DRAFT = "Draft"
    PUBLISHED = "Published"
    CLOSED = "Closed"


@dataclass(frozen=True)
class Option:
    """
    A single labeled choice within a question.

    Properties:
        text: Trimmed, non-empty label
        order: Position within the owning question (0-based)

    Equality is by text only: two options with the same label are the
    same choice regardless of position.
    """

    text: str
    order: int = field(default=0, compare=False)

    @classmethod
    def create(cls, text: str, order: int) -> Option:
        return cls(text=_require_text(text, "Option text"), order=_require_order(order))


@dataclass(frozen=True)
class Question:
    """
    A question with an ordered list of at least two unique options.

    Properties:
        text:
            Question text, unique (case-insensitive) within its survey.
            Answers reference the question by this text.

        order:
            Position within the owning survey (0-based, contiguous).

        options:
            Options in declared order; option.order == index.

    INVARIANTS:
        - len(options) >= 2
        - option texts unique, compared case-insensitively

    Equality is by text only.
    """

    text: str
    order: int = field(default=0, compare=False)
    options: Tuple[Option, ...] = field(default=(), compare=False)

    @classmethod
    def create(cls, text: str, order: int, option_texts: Optional[Iterable[str]]) -> Question:
        """
        Validate and build a question, numbering options 0..n-1.

        Raises:
            InvalidArgumentError: blank text, negative order, missing option list,
                or a blank option text
            InvalidStructureError: fewer than two options, or duplicates
        """
        text = _require_text(text, "Question text")
        order = _require_order(order)
        if option_texts is None:
            raise InvalidArgumentError("Options cannot be null.")
        if isinstance(option_texts, str):
            raise InvalidArgumentError("Options must be a list of texts, not a single string.")

        option_texts = list(option_texts)
        if len(option_texts) < MIN_OPTIONS_PER_QUESTION:
            raise InvalidStructureError("A question must have at least two options.")

        options = tuple(Option.create(t, i) for i, t in enumerate(option_texts))

        seen = set()
        for option in options:
            key = option.text.casefold()
            if key in seen:
                raise InvalidStructureError(f"Option texts must be unique: '{option.text}' is repeated.")
            seen.add(key)

        return cls(text=text, order=order, options=options)

    @property
    def option_texts(self) -> List[str]:
        return [o.text for o in self.options]

    def get_option(self, text: str) -> Optional[Option]:
        """
        Retrieve an option by exact text.

        Returns:
            Option object or None if not found
        """
        for option in self.options:
            if option.text == text:
                return option
        return None

    def reindexed(self, order: int) -> Question:
        """Return this question moved to a new position."""
        return replace(self, order=_require_order(order))


@dataclass(frozen=True)
class SurveyPeriod:
    """
    Window during which a published survey accepts submissions.

    Both ends are inclusive. end_date must be strictly after start_date.
    """

    start_date: datetime
    end_date: datetime

    @classmethod
    def create(cls, start_date: datetime, end_date: datetime) -> SurveyPeriod:
        if not isinstance(start_date, datetime) or not isinstance(end_date, datetime):
            raise InvalidArgumentError("Start and end dates are required.")
        start_date = as_utc(start_date)
        end_date = as_utc(end_date)
        if end_date <= start_date:
            raise InvalidArgumentError("End date must be later than start date.")
        return cls(start_date=start_date, end_date=end_date)

    def contains(self, instant: datetime) -> bool:
        return self.start_date <= as_utc(instant) <= self.end_date

    def format(self, date_format: str = "%d/%m/%Y") -> str:
        return f"{self.start_date.strftime(date_format)} ~ {self.end_date.strftime(date_format)}"


@dataclass
class Survey:
    """
    Aggregate root: a titled, scheduled list of questions with a lifecycle.

    Build new surveys with Survey.create(); the plain constructor exists to
    rehydrate a stored survey and performs no validation.

    Properties:
        id: Unique identifier
        title: Non-empty title
        period: Submission window
        description: Optional free text (blank is stored as None)
        status: Draft, Published or Closed
        questions: Ordered questions; question.order == index
        created_at / updated_at / published_at / closed_at: Timestamps
        version:
            Optimistic concurrency token. Stores compare it on update
            and bump it after a successful write.

    INVARIANTS:
        - Structure (title, period, questions) changes only in Draft
        - Status only moves forward
        - Question texts unique case-insensitively
    """

    id: uuid.UUID
    title: str
    period: SurveyPeriod
    description: Optional[str] = None
    status: SurveyStatus = SurveyStatus.DRAFT
    questions: Tuple[Question, ...] = ()
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    version: int = 0

    @classmethod
    def create(
        cls,
        title: str,
        description: Optional[str],
        start_date: datetime,
        end_date: datetime,
        now: Optional[datetime] = None,
    ) -> Survey:
        title = _require_text(title, "Title")
        description = _clean_description(description)
        period = SurveyPeriod.create(start_date, end_date)
        now = as_utc(now) if now else utcnow()
        return cls(
            id=uuid.uuid4(),
            title=title,
            description=description,
            period=period,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def is_draft(self) -> bool:
        return self.status is SurveyStatus.DRAFT

    def get_question(self, text: str) -> Optional[Question]:
        """
        Retrieve a question by exact text.

        Returns:
            Question object or None if not found
        """
        for question in self.questions:
            if question.text == text:
                return question
        return None

    def has_question_text(self, text: str) -> bool:
        """Case-insensitive existence check used for uniqueness."""
        key = text.strip().casefold()
        return any(q.text.casefold() == key for q in self.questions)

    def accepts_submissions_at(self, instant: datetime) -> bool:
        return self.status is SurveyStatus.PUBLISHED and self.period.contains(instant)

    # -------------------------------------------------------------------------
    # Draft editing
    # -------------------------------------------------------------------------

    def update_details(
        self,
        title: str,
        description: Optional[str],
        start_date: datetime,
        end_date: datetime,
        now: Optional[datetime] = None,
    ) -> None:
        self._require_draft("Only surveys in Draft status can be updated.")
        # Validate everything before assigning anything.
        title = _require_text(title, "Title")
        description = _clean_description(description)
        period = SurveyPeriod.create(start_date, end_date)

        self.title = title
        self.description = description
        self.period = period
        self._touch(now)

    def add_question(self, text: str, options: Optional[Iterable[str]], now: Optional[datetime] = None) -> Question:
        self._require_draft("Only surveys in Draft status can be modified.")
        if isinstance(text, str) and text.strip() and self.has_question_text(text):
            raise DuplicateQuestionError(text.strip())

        question = Question.create(text, len(self.questions), options)
        self.questions = self.questions + (question,)
        self._touch(now)
        return question

    def remove_question(self, index: int, now: Optional[datetime] = None) -> Question:
        self._require_draft("Only surveys in Draft status can be modified.")
        count = len(self.questions)
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < count:
            raise IndexOutOfRangeError(index, count)

        remaining = list(self.questions)
        removed = remaining.pop(index)
        self.questions = tuple(self._reindex(remaining, start=index))
        self._touch(now)
        return removed

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def publish(self, now: Optional[datetime] = None) -> None:
        self._require_draft("Only surveys in Draft status can be published.")
        if not self.questions:
            raise EmptySurveyError()

        self.status = SurveyStatus.PUBLISHED
        self.published_at = as_utc(now) if now else utcnow()

    def close(self, now: Optional[datetime] = None) -> None:
        if self.status is not SurveyStatus.PUBLISHED:
            raise InvalidStateError("Only surveys in Published status can be closed.")

        self.status = SurveyStatus.CLOSED
        self.closed_at = as_utc(now) if now else utcnow()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require_draft(self, message: str) -> None:
        if self.status is not SurveyStatus.DRAFT:
            raise InvalidStateError(message)

    def _touch(self, now: Optional[datetime]) -> None:
        self.updated_at = as_utc(now) if now else utcnow()

    @staticmethod
    def _reindex(questions: List[Question], start: int = 0) -> List[Question]:
        """Renumber questions from `start` onward so order == index."""
        for i in range(start, len(questions)):
            if questions[i].order != i:
                questions[i] = questions[i].reindexed(i)
        return questions


def _clean_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    if not isinstance(description, str):
        raise InvalidArgumentError(f"Description must be text, got {description!r}.")
    if not description.strip():
        return None
    return description.strip()
