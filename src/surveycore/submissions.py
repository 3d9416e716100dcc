"""
Submissions and the rules deciding whether they are accepted.

A submission is checked against the survey *as it is at validation time*.
Once created it is never re-validated, even if the survey changes later.

Check order (first failure wins):
    1. survey exists                          -> NotFoundError
    2. survey is not Draft                    -> NotYetPublishedError
    3. survey is not Closed                   -> SurveyClosedError
    4. now within [start_date, end_date]      -> OutsideScheduleError
    5. every question answered                -> MissingAnswerError
    6. every answered question exists         -> UnknownQuestionError
    7. every chosen option exists             -> InvalidOptionError
    8. no question answered twice             -> DuplicateAnswerError

Submission.create() re-checks its own structural invariant afterwards.
"""

from __future__ import annotations

import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from surveycore.errors import (
    DuplicateAnswerError,
    InvalidArgumentError,
    InvalidOptionError,
    InvalidStructureError,
    MissingAnswerError,
    NotFoundError,
    NotYetPublishedError,
    OutsideScheduleError,
    SurveyClosedError,
    SurveyError,
    UnknownQuestionError,
)
from surveycore.model import Survey, SurveyStatus, as_utc, utcnow


DEFAULT_SCHEDULE_DATE_FORMAT = "%d/%m/%Y"

AnswerLike = Union["Answer", Tuple[str, str], Mapping[str, str]]


@dataclass(frozen=True)
class Answer:
    """
    One respondent's choice for one question.

    Both sides are referenced by text. Value semantics: two answers with the
    same question and option text are equal.
    """

    question_text: str
    option_text: str

    @classmethod
    def create(cls, question_text: str, option_text: str) -> Answer:
        if not isinstance(question_text, str) or not question_text.strip():
            raise InvalidArgumentError("QuestionText cannot be empty.")
        if not isinstance(option_text, str) or not option_text.strip():
            raise InvalidArgumentError("OptionText cannot be empty.")
        return cls(question_text=question_text, option_text=option_text)


@dataclass(frozen=True)
class Submission:
    """
    An accepted, immutable set of answers for one survey.

    Properties:
        id: Unique identifier
        survey_id: Weak reference to the survey (resolved by lookup)
        submitted_at: When the answers were accepted
        answers: At most one answer per question text
    """

    id: uuid.UUID
    survey_id: uuid.UUID
    submitted_at: datetime
    answers: Tuple[Answer, ...]

    @classmethod
    def create(
        cls,
        survey_id: uuid.UUID,
        submitted_at: datetime,
        answers: Optional[Iterable[Answer]],
    ) -> Submission:
        if survey_id is None or survey_id == uuid.UUID(int=0):
            raise InvalidArgumentError("SurveyId cannot be empty.")
        if answers is None:
            raise InvalidArgumentError("Answers cannot be null.")

        answers = tuple(answers)
        if not answers:
            raise InvalidStructureError("A submission must contain at least one answer.")

        for answer in answers:
            if not isinstance(answer, Answer):
                raise InvalidStructureError(f"Expected an Answer, got {answer!r}.")
            if not isinstance(answer.question_text, str) or not answer.question_text.strip():
                raise InvalidStructureError("Answers must reference a question text.")
            if not isinstance(answer.option_text, str) or not answer.option_text.strip():
                raise InvalidStructureError("Answers must reference an option text.")

        counts = Counter(a.question_text for a in answers)
        for question_text, count in counts.items():
            if count > 1:
                raise InvalidStructureError(
                    f"Duplicate answers for QuestionText '{question_text}' are not allowed."
                )

        return cls(
            id=uuid.uuid4(),
            survey_id=survey_id,
            submitted_at=as_utc(submitted_at),
            answers=answers,
        )

    def answer_for(self, question_text: str) -> Optional[Answer]:
        for answer in self.answers:
            if answer.question_text == question_text:
                return answer
        return None


def coerce_answers(answers: Optional[Iterable[AnswerLike]]) -> List[Answer]:
    """
    Normalize caller input into Answer objects.

    Accepts Answer instances, (question_text, option_text) pairs, or mappings
    with `question_text` / `option_text` keys.
    """
    if answers is None:
        raise InvalidArgumentError("Answers cannot be null.")

    result = []
    for item in answers:
        if isinstance(item, Answer):
            result.append(item)
        elif isinstance(item, Mapping):
            result.append(Answer.create(item.get("question_text"), item.get("option_text")))
        elif isinstance(item, (tuple, list)) and len(item) == 2:
            result.append(Answer.create(item[0], item[1]))
        else:
            raise InvalidArgumentError(f"Cannot interpret {item!r} as an answer.")
    return result


def _survey_state_error(
    survey: Optional[Survey],
    now: datetime,
    date_format: str,
) -> Optional[SurveyError]:
    """Checks 1-4: the survey itself must be open for submissions right now."""
    if survey is None:
        return NotFoundError("Survey not found.")
    if survey.status is SurveyStatus.DRAFT:
        return NotYetPublishedError()
    if survey.status is SurveyStatus.CLOSED:
        return SurveyClosedError()
    if not survey.period.contains(now):
        return OutsideScheduleError(survey.period.format(date_format))
    return None


def _answer_errors(survey: Survey, answers: Sequence[Answer]) -> Iterator[SurveyError]:
    """Checks 5-8, yielded in check order."""
    answered = {a.question_text for a in answers}

    for question in survey.questions:
        if question.text not in answered:
            yield MissingAnswerError(question.text)

    for answer in answers:
        if survey.get_question(answer.question_text) is None:
            yield UnknownQuestionError(answer.question_text)

    for answer in answers:
        question = survey.get_question(answer.question_text)
        if question is not None and question.get_option(answer.option_text) is None:
            yield InvalidOptionError(answer.option_text, answer.question_text)

    counts = Counter(a.question_text for a in answers)
    reported = set()
    for answer in answers:
        if counts[answer.question_text] > 1 and answer.question_text not in reported:
            reported.add(answer.question_text)
            yield DuplicateAnswerError(answer.question_text)


def collect_submission_errors(
    survey: Optional[Survey],
    answers: Optional[Iterable[AnswerLike]],
    now: Optional[datetime] = None,
    date_format: str = DEFAULT_SCHEDULE_DATE_FORMAT,
) -> List[SurveyError]:
    """
    Run every check and return all failures, in check order.

    A failure of checks 1-4 is returned alone, because the answer checks
    are meaningless against a survey that is not open.
    """
    now = as_utc(now) if now else utcnow()
    state_error = _survey_state_error(survey, now, date_format)
    if state_error is not None:
        return [state_error]
    return list(_answer_errors(survey, coerce_answers(answers)))


def validate_submission(
    survey: Optional[Survey],
    answers: Optional[Iterable[AnswerLike]],
    now: Optional[datetime] = None,
    date_format: str = DEFAULT_SCHEDULE_DATE_FORMAT,
) -> List[Answer]:
    """
    Raise the first failing check, or return the normalized answers.

    Raises:
        NotFoundError, or a SubmissionRejectedError subclass
    """
    now = as_utc(now) if now else utcnow()
    state_error = _survey_state_error(survey, now, date_format)
    if state_error is not None:
        raise state_error

    normalized = coerce_answers(answers)
    first = next(_answer_errors(survey, normalized), None)
    if first is not None:
        raise first
    return normalized


def create_submission(
    survey: Optional[Survey],
    answers: Optional[Iterable[AnswerLike]],
    now: Optional[datetime] = None,
    date_format: str = DEFAULT_SCHEDULE_DATE_FORMAT,
) -> Submission:
    """Validate `answers` against `survey` and build the Submission."""
    now = as_utc(now) if now else utcnow()
    normalized = validate_submission(survey, answers, now=now, date_format=date_format)
    return Submission.create(survey.id, now, normalized)
