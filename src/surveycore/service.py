"""
SurveyService: one transaction per call around the core.

Each method loads one aggregate from its store, applies exactly one core
operation, and persists the result. Nothing is cached between calls.

Error policy:
    - Domain errors (SurveyError) are logged at WARNING and re-raised.
    - Anything else (store or IO failures) is logged with its traceback
      at ERROR and re-raised unchanged.
"""

from __future__ import annotations

import functools
import logging
import uuid
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from surveycore.config import CoreSettings
from surveycore.errors import NotFoundError, SubmissionRejectedError, SurveyError
from surveycore.model import Question, Survey, utcnow
from surveycore.results import SurveyResult, summarize
from surveycore.stores import SubmissionStore, SurveyStore, paginate
from surveycore.submissions import (
    AnswerLike,
    Submission,
    coerce_answers,
    collect_submission_errors,
    create_submission,
)

logger = logging.getLogger(__name__)


def _logged(action: str):
    """Log failures of a service call according to the error policy."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except SurveyError as e:
                logger.warning("Domain error when %s: %s", action, e)
                raise
            except Exception:
                logger.exception("Internal error while %s.", action)
                raise

        return wrapper

    return decorator


class SurveyService:
    """
    Application-facing entry point for surveys and submissions.

    Args:
        surveys: SurveyStore implementation
        submissions: SubmissionStore implementation
        settings: CoreSettings (defaults when omitted)
        clock: Callable returning the current aware datetime
    """

    def __init__(
        self,
        surveys: SurveyStore,
        submissions: SubmissionStore,
        settings: Optional[CoreSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.surveys = surveys
        self.submissions = submissions
        self.settings = settings or CoreSettings()
        self.clock = clock or utcnow

    def _load(self, survey_id: uuid.UUID) -> Survey:
        survey = self.surveys.get_by_id(survey_id)
        if survey is None:
            raise NotFoundError(f"Survey with ID {survey_id} not found.")
        return survey

    # =========================================================================
    # Surveys
    # =========================================================================

    @_logged("creating survey")
    def create_survey(
        self,
        title: str,
        description: Optional[str],
        start_date: datetime,
        end_date: datetime,
    ) -> Survey:
        survey = Survey.create(title, description, start_date, end_date, now=self.clock())
        self.surveys.add(survey)
        logger.info("Created survey %s (%s)", survey.id, survey.title)
        return survey

    @_logged("updating survey")
    def update_survey(
        self,
        survey_id: uuid.UUID,
        title: str,
        description: Optional[str],
        start_date: datetime,
        end_date: datetime,
    ) -> Survey:
        survey = self._load(survey_id)
        survey.update_details(title, description, start_date, end_date, now=self.clock())
        self.surveys.update(survey)
        return survey

    @_logged("deleting survey")
    def delete_survey(self, survey_id: uuid.UUID, purge_submissions: bool = False) -> None:
        """
        Delete a survey.

        Submissions only hold a weak reference and are kept unless
        `purge_submissions` is True.
        """
        self.surveys.delete(survey_id)
        if purge_submissions:
            for submission in self.submissions.get_by_survey_id(survey_id):
                self.submissions.delete(submission.id)
        logger.info("Deleted survey %s", survey_id)

    @_logged("adding question")
    def add_question(self, survey_id: uuid.UUID, text: str, options: Iterable[str]) -> Question:
        survey = self._load(survey_id)
        question = survey.add_question(text, options, now=self.clock())
        self.surveys.update(survey)
        return question

    @_logged("removing question")
    def remove_question(self, survey_id: uuid.UUID, index: int) -> Question:
        survey = self._load(survey_id)
        removed = survey.remove_question(index, now=self.clock())
        self.surveys.update(survey)
        return removed

    @_logged("publishing survey")
    def publish_survey(self, survey_id: uuid.UUID) -> Survey:
        survey = self._load(survey_id)
        survey.publish(now=self.clock())
        self.surveys.update(survey)
        logger.info("Published survey %s", survey_id)
        return survey

    @_logged("closing survey")
    def close_survey(self, survey_id: uuid.UUID) -> Survey:
        survey = self._load(survey_id)
        survey.close(now=self.clock())
        self.surveys.update(survey)
        logger.info("Closed survey %s", survey_id)
        return survey

    @_logged("retrieving survey")
    def get_survey(self, survey_id: uuid.UUID) -> Survey:
        return self._load(survey_id)

    @_logged("listing surveys")
    def list_surveys(self, page_number: int = 1, page_size: Optional[int] = None) -> List[Survey]:
        return paginate(
            self.surveys.get_all(),
            page_number,
            page_size if page_size is not None else self.settings.default_page_size,
            self.settings.max_page_size,
        )

    @_logged("retrieving survey results")
    def get_result(self, survey_id: uuid.UUID) -> SurveyResult:
        survey = self._load(survey_id)
        return summarize(survey, self.submissions.get_by_survey_id(survey_id))

    @_logged("deleting all surveys")
    def purge_surveys(self) -> int:
        surveys = self.surveys.get_all()
        for survey in surveys:
            self.surveys.delete(survey.id)
        logger.info("Purged %d survey(s)", len(surveys))
        return len(surveys)

    # =========================================================================
    # Submissions
    # =========================================================================

    @_logged("creating submission")
    def submit(self, survey_id: uuid.UUID, answers: Iterable[AnswerLike]) -> Submission:
        """
        Validate answers against the survey's current questions and store them.

        With settings.collect_all_errors the raised SubmissionRejectedError
        lists every failure in its `errors` attribute.
        """
        survey = self.surveys.get_by_id(survey_id)
        now = self.clock()
        date_format = self.settings.schedule_date_format

        if self.settings.collect_all_errors:
            answers = coerce_answers(answers)
            errors = collect_submission_errors(survey, answers, now=now, date_format=date_format)
            if len(errors) == 1:
                raise errors[0]
            if errors:
                raise SubmissionRejectedError(
                    "; ".join(str(e) for e in errors),
                    errors=errors,
                )

        submission = create_submission(survey, answers, now=now, date_format=date_format)
        self.submissions.add(submission)
        logger.info("Accepted submission %s for survey %s", submission.id, survey_id)
        return submission

    @_logged("retrieving submission")
    def get_submission(self, submission_id: uuid.UUID) -> Submission:
        submission = self.submissions.get_by_id(submission_id)
        if submission is None:
            raise NotFoundError(f"Submission with ID {submission_id} not found.")
        return submission

    @_logged("listing submissions")
    def list_submissions(
        self,
        page_number: int = 1,
        page_size: Optional[int] = None,
        survey_id: Optional[uuid.UUID] = None,
    ) -> List[Submission]:
        if survey_id is None:
            items = self.submissions.get_all()
        else:
            items = self.submissions.get_by_survey_id(survey_id)
        return paginate(
            items,
            page_number,
            page_size if page_size is not None else self.settings.default_page_size,
            self.settings.max_page_size,
        )

    @_logged("deleting all submissions")
    def purge_submissions(self) -> int:
        return self.submissions.purge()
