"""
Result aggregation: vote counts and percentages for a survey.

summarize() is a pure reduction of a Survey plus its Submissions.
It does NOT modify either input.

Percentages are computed per question. When a question has no votes every
option reports 0.0 rather than dividing by zero. Rounded percentages are
not forced to add up to exactly 100.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional
import uuid

from surveycore.model import Survey, SurveyPeriod, SurveyStatus
from surveycore.submissions import Submission


@dataclass
class OptionResult:
    """Votes for one option."""
    text: str
    order: int
    votes: int = 0
    percentage: float = 0.0


@dataclass
class QuestionResult:
    """Votes for one question, options in declared order."""
    text: str
    order: int
    total_votes: int = 0
    options: List[OptionResult] = field(default_factory=list)

    def get_option(self, text: str) -> Optional[OptionResult]:
        for option in self.options:
            if option.text == text:
                return option
        return None


@dataclass
class SurveyResult:
    """Summarized results for a survey, questions in survey order."""

    survey_id: uuid.UUID
    title: str
    description: Optional[str]
    status: SurveyStatus
    period: SurveyPeriod
    created_at: datetime
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    total_submissions: int = 0
    questions: List[QuestionResult] = field(default_factory=list)

    def get_question(self, text: str) -> Optional[QuestionResult]:
        for question in self.questions:
            if question.text == text:
                return question
        return None


def _percentage(votes: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return votes / total * 100


def summarize(survey: Survey, submissions: Iterable[Submission]) -> SurveyResult:
    """
    Count answers per question and per option.

    Submissions belonging to another survey are ignored. Answers whose
    question or option is not part of the survey contribute nothing.
    """
    relevant = [s for s in submissions if s.survey_id == survey.id]

    question_votes: Counter = Counter()
    option_votes: Counter = Counter()
    for submission in relevant:
        for answer in submission.answers:
            question_votes[answer.question_text] += 1
            option_votes[(answer.question_text, answer.option_text)] += 1

    result = SurveyResult(
        survey_id=survey.id,
        title=survey.title,
        description=survey.description,
        status=survey.status,
        period=survey.period,
        created_at=survey.created_at,
        updated_at=survey.updated_at,
        published_at=survey.published_at,
        closed_at=survey.closed_at,
        total_submissions=len(relevant),
    )

    for question in survey.questions:
        total = question_votes[question.text]
        question_result = QuestionResult(text=question.text, order=question.order, total_votes=total)
        for option in question.options:
            votes = option_votes[(question.text, option.text)]
            question_result.options.append(
                OptionResult(
                    text=option.text,
                    order=option.order,
                    votes=votes,
                    percentage=_percentage(votes, total),
                )
            )
        result.questions.append(question_result)

    return result
