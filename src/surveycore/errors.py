"""
Domain error taxonomy for the survey core.

Every error raised by the core derives from SurveyError. These are expected,
recoverable outcomes of calling an operation with bad input or in the wrong
lifecycle state. Callers translate them into user-facing responses.

Infrastructure failures (storage, IO) are never wrapped in these classes.
"""

from typing import List, Optional


class SurveyError(Exception):
    """Base class for all domain errors raised by the core."""
    pass


class InvalidArgumentError(SurveyError, ValueError):
    """Malformed scalar input (empty text, negative order, missing collection)."""
    pass


class InvalidStructureError(SurveyError, ValueError):
    """A composite is structurally invalid (too few options, duplicate texts)."""
    pass


class DuplicateQuestionError(InvalidStructureError):
    """A question with the same text already exists in the survey."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"A question with the same text already exists in the survey: '{text}'.")


class InvalidStateError(SurveyError):
    """The operation is illegal in the survey's current lifecycle state."""
    pass


class EmptySurveyError(SurveyError):
    """A survey without questions cannot be published."""

    def __init__(self, message: str = "Cannot publish a survey with no questions."):
        super().__init__(message)


class IndexOutOfRangeError(SurveyError, IndexError):
    """A positional reference (question index) is invalid."""

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(f"Invalid question index {index}: survey has {count} question(s).")


class NotFoundError(SurveyError, LookupError):
    """A referenced survey or submission does not exist."""
    pass


class ConcurrencyConflictError(SurveyError):
    """The stored aggregate changed since it was loaded."""

    def __init__(self, aggregate_id, expected: int, actual: int):
        self.aggregate_id = aggregate_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Survey {aggregate_id} was modified concurrently "
            f"(loaded version {expected}, stored version {actual})."
        )


# =============================================================================
# Submission rejections
# =============================================================================


class SubmissionRejectedError(SurveyError):
    """
    Base class for reasons a set of answers is refused for a survey.

    When raised in collect-all mode, `errors` holds every individual
    rejection found, in check order.
    """

    def __init__(self, message: str, errors: Optional[List["SubmissionRejectedError"]] = None):
        super().__init__(message)
        self.errors: List[SubmissionRejectedError] = list(errors) if errors else []


class NotYetPublishedError(SubmissionRejectedError):
    def __init__(self):
        super().__init__(
            "It is not possible to submit responses to a survey that has not yet been published."
        )


class SurveyClosedError(SubmissionRejectedError):
    def __init__(self):
        super().__init__(
            "It is not possible to submit responses for a survey that has already been closed."
        )


class OutsideScheduleError(SubmissionRejectedError):
    def __init__(self, window: str):
        self.window = window
        super().__init__(
            f"It is not possible to submit responses to a survey outside of its scheduled period ({window})."
        )


class MissingAnswerError(SubmissionRejectedError):
    def __init__(self, question_text: str):
        self.question_text = question_text
        super().__init__(f"The question ({question_text}) was not answered.")


class UnknownQuestionError(SubmissionRejectedError):
    def __init__(self, question_text: str):
        self.question_text = question_text
        super().__init__(f"({question_text}) was not found in the survey.")


class InvalidOptionError(SubmissionRejectedError):
    def __init__(self, option_text: str, question_text: str):
        self.option_text = option_text
        self.question_text = question_text
        super().__init__(f"({option_text}) is not a valid option for the question ({question_text}).")


class DuplicateAnswerError(SubmissionRejectedError):
    def __init__(self, question_text: str):
        self.question_text = question_text
        super().__init__(
            f"Each question can only be answered once. Review the question ({question_text})."
        )
