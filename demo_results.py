"""
Demo: Publish the example survey, collect a few submissions and print results.

Usage: python demo_results.py [settings.yaml]
"""

import sys

from surveycore.config import load_settings
from surveycore.examples import build_example_survey
from surveycore.errors import SubmissionRejectedError
from surveycore.logger import setup_logging
from surveycore.service import SurveyService
from surveycore.serialization import result_to_yaml
from surveycore.stores import InMemorySubmissionStore, InMemorySurveyStore


RESPONSES = [
    {"How did you hear about us?": "Friend", "How satisfied are you?": "Very satisfied", "Would you recommend us?": "Yes"},
    {"How did you hear about us?": "Search engine", "How satisfied are you?": "Satisfied", "Would you recommend us?": "Yes"},
    {"How did you hear about us?": "Friend", "How satisfied are you?": "Neutral", "Would you recommend us?": "No"},
    # Rejected: unknown option
    {"How did you hear about us?": "Radio", "How satisfied are you?": "Neutral", "Would you recommend us?": "No"},
]


def print_result(result):
    """Pretty-print a SurveyResult."""
    print()
    print("=" * 70)
    print(f"SURVEY RESULTS: {result.title}")
    print("=" * 70)
    print(f"  Status:       {result.status.value}")
    print(f"  Submissions:  {result.total_submissions}")
    print()

    for question in result.questions:
        print(f"  {question.order + 1}. {question.text}  ({question.total_votes} vote(s))")
        for option in question.options:
            bar = "#" * int(round(option.percentage / 5))
            print(f"       {option.text:<16} {option.votes:>3}  {option.percentage:6.2f}%  {bar}")
        print()


if __name__ == "__main__":
    settings = load_settings(sys.argv[1] if len(sys.argv) > 1 else None)
    setup_logging(settings.log_level)

    service = SurveyService(InMemorySurveyStore(), InMemorySubmissionStore(), settings=settings)
    survey = build_example_survey(publish=True)
    service.surveys.add(survey)

    for response in RESPONSES:
        try:
            service.submit(survey.id, list(response.items()))
        except SubmissionRejectedError as e:
            print(f"Rejected: {e}")

    result = service.get_result(survey.id)
    print_result(result)

    with open("example_results.yaml", "w") as f:
        f.write(result_to_yaml(result))
    print("Results exported to example_results.yaml")
