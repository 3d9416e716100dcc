"""
Example survey builder for demos and tests.

Builds a small customer-feedback survey with three questions, optionally
published, scheduled around a reference instant.
"""
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from surveycore.model import Survey, utcnow


EXAMPLE_QUESTIONS: List[Tuple[str, List[str]]] = [
    ("How did you hear about us?", ["Friend", "Search engine", "Advertisement"]),
    ("How satisfied are you?", ["Very satisfied", "Satisfied", "Neutral", "Unsatisfied"]),
    ("Would you recommend us?", ["Yes", "No"]),
]


def build_example_survey(
    publish: bool = True,
    now: Optional[datetime] = None,
    days_open: int = 30,
) -> Survey:
    now = now or utcnow()
    survey = Survey.create(
        title="Customer Feedback",
        description="Quarterly customer satisfaction survey",
        start_date=now - timedelta(days=1),
        end_date=now + timedelta(days=days_open),
        now=now,
    )

    for text, options in EXAMPLE_QUESTIONS:
        survey.add_question(text, options, now=now)

    if publish:
        survey.publish(now=now)

    return survey
