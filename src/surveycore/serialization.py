"""
Serialization helpers for surveys, submissions and results.

Provides lossless JSON/YAML round-trip via intermediate dict representation.
This module intentionally keeps serialization structure stable and explicit:
datetimes are ISO-8601 strings, identifiers are UUID strings, enums are
their values.
"""
from __future__ import annotations

import json
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

import yaml

from surveycore.model import (
    as_utc,
    Option,
    Question,
    Survey,
    SurveyPeriod,
    SurveyStatus,
)
from surveycore.results import OptionResult, QuestionResult, SurveyResult
from surveycore.submissions import Answer, Submission


def _dt_to_str(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def _dt_from_str(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    # PyYAML may already hand back a datetime for unquoted timestamps.
    if isinstance(value, datetime):
        return as_utc(value)
    return as_utc(datetime.fromisoformat(value))


def option_to_dict(o: Option) -> Dict[str, Any]:
    return {"text": o.text, "order": o.order}


def option_from_dict(d: Dict[str, Any]) -> Option:
    return Option(text=d["text"], order=d.get("order", 0))


def question_to_dict(q: Question) -> Dict[str, Any]:
    return {
        "text": q.text,
        "order": q.order,
        "options": [option_to_dict(o) for o in q.options],
    }


def question_from_dict(d: Dict[str, Any]) -> Question:
    return Question(
        text=d["text"],
        order=d.get("order", 0),
        options=tuple(option_from_dict(o) for o in d.get("options", [])),
    )


def period_to_dict(p: SurveyPeriod) -> Dict[str, Any]:
    return {"start_date": _dt_to_str(p.start_date), "end_date": _dt_to_str(p.end_date)}


def period_from_dict(d: Dict[str, Any]) -> SurveyPeriod:
    return SurveyPeriod(start_date=_dt_from_str(d["start_date"]), end_date=_dt_from_str(d["end_date"]))


def survey_to_dict(s: Survey) -> Dict[str, Any]:
    return {
        "id": str(s.id),
        "title": s.title,
        "description": s.description,
        "status": s.status.value,
        "period": period_to_dict(s.period),
        "questions": [question_to_dict(q) for q in s.questions],
        "created_at": _dt_to_str(s.created_at),
        "updated_at": _dt_to_str(s.updated_at),
        "published_at": _dt_to_str(s.published_at),
        "closed_at": _dt_to_str(s.closed_at),
        "version": s.version,
    }


def survey_from_dict(d: Dict[str, Any]) -> Survey:
    return Survey(
        id=uuid.UUID(d["id"]),
        title=d["title"],
        description=d.get("description"),
        status=SurveyStatus(d.get("status", SurveyStatus.DRAFT.value)),
        period=period_from_dict(d["period"]),
        questions=tuple(question_from_dict(q) for q in d.get("questions", [])),
        created_at=_dt_from_str(d["created_at"]),
        updated_at=_dt_from_str(d.get("updated_at")),
        published_at=_dt_from_str(d.get("published_at")),
        closed_at=_dt_from_str(d.get("closed_at")),
        version=d.get("version", 0),
    )


def answer_to_dict(a: Answer) -> Dict[str, Any]:
    return {"question_text": a.question_text, "option_text": a.option_text}


def answer_from_dict(d: Dict[str, Any]) -> Answer:
    return Answer(question_text=d["question_text"], option_text=d["option_text"])


def submission_to_dict(s: Submission) -> Dict[str, Any]:
    return {
        "id": str(s.id),
        "survey_id": str(s.survey_id),
        "submitted_at": _dt_to_str(s.submitted_at),
        "answers": [answer_to_dict(a) for a in s.answers],
    }


def submission_from_dict(d: Dict[str, Any]) -> Submission:
    return Submission(
        id=uuid.UUID(d["id"]),
        survey_id=uuid.UUID(d["survey_id"]),
        submitted_at=_dt_from_str(d["submitted_at"]),
        answers=tuple(answer_from_dict(a) for a in d.get("answers", [])),
    )


def result_to_dict(r: SurveyResult) -> Dict[str, Any]:
    """Output-only shape for reporting; results are recomputed, never loaded."""
    return {
        "survey_id": str(r.survey_id),
        "title": r.title,
        "description": r.description or "",
        "status": r.status.value,
        "period": period_to_dict(r.period),
        "created_at": _dt_to_str(r.created_at),
        "updated_at": _dt_to_str(r.updated_at),
        "published_at": _dt_to_str(r.published_at),
        "closed_at": _dt_to_str(r.closed_at),
        "total_submissions": r.total_submissions,
        "questions": [_question_result_to_dict(q) for q in r.questions],
    }


def _question_result_to_dict(q: QuestionResult) -> Dict[str, Any]:
    return {
        "text": q.text,
        "total_votes": q.total_votes,
        "options": [_option_result_to_dict(o) for o in q.options],
    }


def _option_result_to_dict(o: OptionResult) -> Dict[str, Any]:
    return {"text": o.text, "votes": o.votes, "percentage": o.percentage}


def survey_to_json(s: Survey) -> str:
    return json.dumps(survey_to_dict(s), sort_keys=True)


def survey_from_json(s: str) -> Survey:
    d = json.loads(s)
    return survey_from_dict(d)


def survey_to_yaml(s: Survey) -> str:
    return yaml.safe_dump(survey_to_dict(s), sort_keys=False)


def survey_from_yaml(s: str) -> Survey:
    d = yaml.safe_load(s)
    return survey_from_dict(d)


def submission_to_json(s: Submission) -> str:
    return json.dumps(submission_to_dict(s), sort_keys=True)


def submission_from_json(s: str) -> Submission:
    return submission_from_dict(json.loads(s))


def submission_to_yaml(s: Submission) -> str:
    return yaml.safe_dump(submission_to_dict(s), sort_keys=False)


def submission_from_yaml(s: str) -> Submission:
    return submission_from_dict(yaml.safe_load(s))


def result_to_yaml(r: SurveyResult) -> str:
    return yaml.safe_dump(result_to_dict(r), sort_keys=False)
