"""
Runtime settings for the survey core.

Settings are plain data. They are loaded once by the embedding application
(from a YAML file or a mapping) and passed to SurveyService.

Example settings.yaml:

    schedule_date_format: "%d/%m/%Y"
    default_page_size: 10
    max_page_size: 100
    collect_all_errors: false
    log_level: INFO
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from surveycore.errors import InvalidArgumentError


@dataclass(frozen=True)
class CoreSettings:
    """
    Properties:
        schedule_date_format:
            strftime format used when reporting a survey window
            in OutsideScheduleError messages

        default_page_size / max_page_size:
            Pagination defaults for list operations

        collect_all_errors:
            When True, SurveyService.submit() reports every rejected
            answer at once instead of the first one

        log_level:
            Name of the level passed to setup_logging()
    """

    schedule_date_format: str = "%d/%m/%Y"
    default_page_size: int = 10
    max_page_size: int = 100
    collect_all_errors: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        if self.default_page_size < 1 or self.max_page_size < 1:
            raise InvalidArgumentError("Page sizes must be at least 1.")
        if self.default_page_size > self.max_page_size:
            raise InvalidArgumentError("default_page_size cannot exceed max_page_size.")
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            raise InvalidArgumentError(f"Unknown log level: {self.log_level!r}.")

    @classmethod
    def from_dict(cls, d: Optional[Mapping[str, Any]]) -> CoreSettings:
        if not d:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise InvalidArgumentError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return cls(**dict(d))


def load_settings(path: Union[str, Path, None] = None) -> CoreSettings:
    """Load settings from a YAML file; defaults when `path` is None."""
    if path is None:
        return CoreSettings()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    with open(path) as fh:
        data = yaml.safe_load(fh)
    return CoreSettings.from_dict(data)
