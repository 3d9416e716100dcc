"""
Tests for the survey model objects and the survey lifecycle.

These tests verify:
    - Option and Question construction rules
    - SurveyPeriod validation
    - Draft editing (details, add/remove question, reordering)
    - Draft -> Published -> Closed transitions and their guards
"""

from datetime import datetime, timedelta, timezone

import pytest

from surveycore.errors import (
    DuplicateQuestionError,
    EmptySurveyError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    InvalidStateError,
    InvalidStructureError,
)
from surveycore.model import Option, Question, Survey, SurveyPeriod, SurveyStatus


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
START = NOW - timedelta(days=1)
END = NOW + timedelta(days=7)


def make_survey(**kwargs) -> Survey:
    params = dict(title="Team pulse", description="Monthly check-in", start_date=START, end_date=END, now=NOW)
    params.update(kwargs)
    return Survey.create(**params)


def make_published_survey() -> Survey:
    survey = make_survey()
    survey.add_question("Color?", ["Red", "Blue"], now=NOW)
    survey.publish(now=NOW)
    return survey


class TestOption:
    """Test Option construction."""

    def test_create_option(self):
        """Should keep trimmed text and order."""
        option = Option.create("  Red ", 2)
        assert option.text == "Red"
        assert option.order == 2

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_blank_text_rejected(self, text):
        with pytest.raises(InvalidArgumentError):
            Option.create(text, 0)

    def test_negative_order_rejected(self):
        with pytest.raises(InvalidArgumentError):
            Option.create("Red", -1)

    def test_equality_by_text(self):
        """Position does not take part in equality."""
        assert Option.create("Red", 0) == Option.create("Red", 3)
        assert Option.create("Red", 0) != Option.create("Blue", 0)


class TestQuestion:
    """Test Question construction and its structural invariants."""

    def test_options_numbered_in_order(self):
        question = Question.create("Color?", 0, ["Red", "Blue", "Green"])
        assert question.option_texts == ["Red", "Blue", "Green"]
        assert [o.order for o in question.options] == [0, 1, 2]

    def test_case_insensitive_duplicate_rejected(self):
        with pytest.raises(InvalidStructureError):
            Question.create("Color?", 0, ["Red", "Blue", "red"])

    def test_single_option_rejected(self):
        with pytest.raises(InvalidStructureError):
            Question.create("Color?", 0, ["Red"])

    def test_no_options_rejected(self):
        with pytest.raises(InvalidStructureError):
            Question.create("Color?", 0, [])

    def test_missing_option_list_rejected(self):
        with pytest.raises(InvalidArgumentError):
            Question.create("Color?", 0, None)

    def test_blank_option_rejected(self):
        with pytest.raises(InvalidArgumentError):
            Question.create("Color?", 0, ["Red", " "])

    def test_blank_text_rejected(self):
        with pytest.raises(InvalidArgumentError):
            Question.create("", 0, ["Red", "Blue"])

    def test_negative_order_rejected(self):
        with pytest.raises(InvalidArgumentError):
            Question.create("Color?", -1, ["Red", "Blue"])

    def test_get_option(self):
        question = Question.create("Color?", 0, ["Red", "Blue"])
        assert question.get_option("Blue").order == 1
        assert question.get_option("Green") is None

    def test_reindexed_keeps_options(self):
        question = Question.create("Color?", 3, ["Red", "Blue"])
        moved = question.reindexed(1)
        assert moved.order == 1
        assert moved.options == question.options
        assert question.order == 3


class TestSurveyPeriod:
    """Test SurveyPeriod validation."""

    def test_valid_period(self):
        period = SurveyPeriod.create(START, END)
        assert period.start_date == START
        assert period.end_date == END

    def test_end_equal_to_start_rejected(self):
        with pytest.raises(InvalidArgumentError):
            SurveyPeriod.create(START, START)

    def test_end_before_start_rejected(self):
        with pytest.raises(InvalidArgumentError):
            SurveyPeriod.create(END, START)

    def test_naive_datetimes_treated_as_utc(self):
        period = SurveyPeriod.create(datetime(2026, 1, 1), datetime(2026, 2, 1))
        assert period.start_date.tzinfo == timezone.utc

    def test_contains_is_inclusive(self):
        period = SurveyPeriod.create(START, END)
        assert period.contains(START)
        assert period.contains(END)
        assert not period.contains(END + timedelta(seconds=1))
        assert not period.contains(START - timedelta(seconds=1))

    def test_format(self):
        period = SurveyPeriod.create(datetime(2026, 1, 5), datetime(2026, 2, 10))
        assert period.format() == "05/01/2026 ~ 10/02/2026"


class TestSurveyCreate:
    """Test Survey.create."""

    def test_create_starts_in_draft(self):
        survey = make_survey()
        assert survey.status is SurveyStatus.DRAFT
        assert survey.questions == ()
        assert survey.published_at is None
        assert survey.closed_at is None
        assert survey.created_at == NOW
        assert survey.updated_at == NOW

    def test_blank_description_stored_as_none(self):
        survey = make_survey(description="   ")
        assert survey.description is None

    @pytest.mark.parametrize("description", [5, ["notes"], b"bytes"])
    def test_non_text_description_rejected(self, description):
        with pytest.raises(InvalidArgumentError):
            make_survey(description=description)

    def test_blank_title_rejected(self):
        with pytest.raises(InvalidArgumentError):
            make_survey(title=" ")

    def test_invalid_period_rejected(self):
        with pytest.raises(InvalidArgumentError):
            make_survey(start_date=END, end_date=START)

    def test_ids_are_unique(self):
        assert make_survey().id != make_survey().id


class TestSurveyEditing:
    """Test Draft-only editing operations."""

    def test_update_details_replaces_fields(self):
        survey = make_survey()
        later = NOW + timedelta(hours=1)
        new_end = END + timedelta(days=3)
        survey.update_details("Renamed", None, START, new_end, now=later)
        assert survey.title == "Renamed"
        assert survey.description is None
        assert survey.period.end_date == new_end
        assert survey.updated_at == later

    def test_update_details_is_atomic(self):
        """A bad period leaves title and description untouched."""
        survey = make_survey()
        with pytest.raises(InvalidArgumentError):
            survey.update_details("Renamed", "New", END, START)
        assert survey.title == "Team pulse"
        assert survey.description == "Monthly check-in"
        assert survey.period.end_date == END

    def test_update_details_bad_description_changes_nothing(self):
        survey = make_survey()
        with pytest.raises(InvalidArgumentError):
            survey.update_details("Renamed", 5, START, END + timedelta(days=1))
        assert survey.title == "Team pulse"
        assert survey.description == "Monthly check-in"
        assert survey.period.end_date == END
        assert survey.updated_at == NOW

    def test_add_question_appends_in_order(self):
        survey = make_survey()
        survey.add_question("Q1", ["A", "B"], now=NOW)
        survey.add_question("Q2", ["A", "B"], now=NOW)
        assert [q.text for q in survey.questions] == ["Q1", "Q2"]
        assert [q.order for q in survey.questions] == [0, 1]

    def test_add_question_bumps_updated_at(self):
        survey = make_survey()
        later = NOW + timedelta(minutes=5)
        survey.add_question("Q1", ["A", "B"], now=later)
        assert survey.updated_at == later

    def test_duplicate_question_rejected_case_insensitively(self):
        survey = make_survey()
        survey.add_question("Color?", ["Red", "Blue"])
        with pytest.raises(DuplicateQuestionError):
            survey.add_question("color?", ["Yes", "No"])
        assert len(survey.questions) == 1

    def test_duplicate_question_is_a_structure_error(self):
        survey = make_survey()
        survey.add_question("Color?", ["Red", "Blue"])
        with pytest.raises(InvalidStructureError):
            survey.add_question("COLOR?", ["Yes", "No"])

    def test_invalid_question_not_added(self):
        survey = make_survey()
        with pytest.raises(InvalidStructureError):
            survey.add_question("Color?", ["Red"])
        assert survey.questions == ()

    def test_remove_question_reorders_remaining(self):
        survey = make_survey()
        for text in ["Q0", "Q1", "Q2", "Q3"]:
            survey.add_question(text, ["A", "B"])

        removed = survey.remove_question(1)

        assert removed.text == "Q1"
        assert [q.text for q in survey.questions] == ["Q0", "Q2", "Q3"]
        assert [q.order for q in survey.questions] == [0, 1, 2]

    def test_remove_last_question(self):
        survey = make_survey()
        survey.add_question("Q0", ["A", "B"])
        survey.add_question("Q1", ["A", "B"])
        survey.remove_question(1)
        assert [q.order for q in survey.questions] == [0]

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_remove_question_out_of_range(self, index):
        survey = make_survey()
        survey.add_question("Q0", ["A", "B"])
        survey.add_question("Q1", ["A", "B"])
        with pytest.raises(IndexOutOfRangeError):
            survey.remove_question(index)
        assert len(survey.questions) == 2

    def test_get_question(self):
        survey = make_survey()
        survey.add_question("Color?", ["Red", "Blue"])
        assert survey.get_question("Color?") is not None
        assert survey.get_question("Size?") is None


class TestSurveyLifecycle:
    """Test Draft -> Published -> Closed transitions."""

    def test_publish_empty_survey_fails(self):
        survey = make_survey()
        with pytest.raises(EmptySurveyError):
            survey.publish()
        assert survey.status is SurveyStatus.DRAFT

    def test_publish_sets_status_and_timestamp(self):
        survey = make_survey()
        survey.add_question("Color?", ["Red", "Blue"])
        survey.publish(now=NOW)
        assert survey.status is SurveyStatus.PUBLISHED
        assert survey.published_at == NOW

    def test_publish_twice_fails(self):
        survey = make_published_survey()
        with pytest.raises(InvalidStateError):
            survey.publish()

    def test_close_published_survey(self):
        survey = make_published_survey()
        survey.close(now=END)
        assert survey.status is SurveyStatus.CLOSED
        assert survey.closed_at == END

    def test_close_draft_fails(self):
        survey = make_survey()
        with pytest.raises(InvalidStateError):
            survey.close()

    def test_close_closed_fails(self):
        survey = make_published_survey()
        survey.close()
        with pytest.raises(InvalidStateError):
            survey.close()

    def test_closed_survey_cannot_be_published(self):
        survey = make_published_survey()
        survey.close()
        with pytest.raises(InvalidStateError):
            survey.publish()

    @pytest.mark.parametrize("close", [False, True])
    def test_editing_outside_draft_fails(self, close):
        survey = make_published_survey()
        if close:
            survey.close()

        with pytest.raises(InvalidStateError):
            survey.add_question("Size?", ["S", "M"])
        with pytest.raises(InvalidStateError):
            survey.remove_question(0)
        with pytest.raises(InvalidStateError, match="Only surveys in Draft status can be updated."):
            survey.update_details("New", None, START, END)

        assert [q.text for q in survey.questions] == ["Color?"]

    def test_accepts_submissions_at(self):
        survey = make_survey()
        survey.add_question("Color?", ["Red", "Blue"])
        assert not survey.accepts_submissions_at(NOW)
        survey.publish()
        assert survey.accepts_submissions_at(NOW)
        assert not survey.accepts_submissions_at(END + timedelta(days=1))
        survey.close()
        assert not survey.accepts_submissions_at(NOW)
