"""
Survey Lifecycle Core

Defines surveys, their Draft -> Published -> Closed lifecycle, the rules for
accepting respondent submissions, and result aggregation.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - HTTP or any other transport
    - A concrete database
    - Authentication

Callers load a Survey, apply one operation, and persist the result
through the store interfaces in `surveycore.stores`.
"""

__version__ = "0.1.0"
