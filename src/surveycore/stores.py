"""
Storage collaborators for surveys and submissions.

The core never talks to a database. It defines the two store interfaces it
needs and ships two reference backends:
    - in memory (tests, embedding)
    - one YAML file per aggregate in a directory

Both backends keep *serialized snapshots*, never live objects. Every read
returns a freshly rehydrated aggregate with all questions and options, so
two callers never share one Survey instance.

Survey updates use optimistic concurrency: the stored version must equal
the version the caller loaded, and is bumped on success.
"""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Protocol, Sequence, TypeVar, Union

import yaml

from surveycore.errors import ConcurrencyConflictError, InvalidArgumentError, NotFoundError
from surveycore.model import Survey
from surveycore.serialization import (
    submission_from_dict,
    submission_to_dict,
    survey_from_dict,
    survey_to_dict,
)
from surveycore.submissions import Submission

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Interfaces
# =============================================================================


class SurveyStore(Protocol):
    def add(self, survey: Survey) -> None: ...

    def update(self, survey: Survey) -> None: ...

    def delete(self, survey_id: uuid.UUID) -> None: ...

    def get_by_id(self, survey_id: uuid.UUID) -> Optional[Survey]: ...

    def get_all(self) -> List[Survey]: ...

    def exists(self, survey_id: uuid.UUID) -> bool: ...


class SubmissionStore(Protocol):
    def add(self, submission: Submission) -> None: ...

    def delete(self, submission_id: uuid.UUID) -> None: ...

    def get_by_id(self, submission_id: uuid.UUID) -> Optional[Submission]: ...

    def get_all(self) -> List[Submission]: ...

    def get_by_survey_id(self, survey_id: uuid.UUID) -> List[Submission]: ...

    def purge(self) -> int: ...


# =============================================================================
# Pagination
# =============================================================================


def paginate(
    items: Sequence[T],
    page_number: int = 1,
    page_size: int = 10,
    max_page_size: Optional[int] = None,
) -> List[T]:
    """
    Return one 1-based page of `items`.

    Pages past the end are empty. page_size is silently capped at
    max_page_size when one is given.
    """
    if page_number < 1:
        raise InvalidArgumentError("Page number must be at least 1.")
    if page_size < 1:
        raise InvalidArgumentError("Page size must be at least 1.")
    if max_page_size is not None:
        page_size = min(page_size, max_page_size)

    start = (page_number - 1) * page_size
    return list(items[start:start + page_size])


# =============================================================================
# Raw snapshot backends
# =============================================================================


class MemoryBackend:
    """Dict snapshots kept in a process-local mapping."""

    def __init__(self):
        self._rows: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self._rows.get(key)

    def put(self, key: str, data: Dict[str, Any]) -> None:
        self._rows[key] = data

    def remove(self, key: str) -> None:
        self._rows.pop(key, None)

    def values(self) -> Iterator[Dict[str, Any]]:
        return iter(list(self._rows.values()))


class YamlDirectoryBackend:
    """One `<key>.yaml` file per snapshot inside `directory`."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.yaml"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path) as fh:
            return yaml.safe_load(fh)

    def put(self, key: str, data: Dict[str, Any]) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".yaml.tmp")
        with open(tmp, "w") as fh:
            yaml.safe_dump(data, fh, sort_keys=False)
        os.replace(tmp, path)

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()

    def values(self) -> Iterator[Dict[str, Any]]:
        for path in sorted(self.directory.glob("*.yaml")):
            with open(path) as fh:
                yield yaml.safe_load(fh)


# =============================================================================
# Stores
# =============================================================================


class SnapshotSurveyStore:
    """SurveyStore over any snapshot backend."""

    def __init__(self, backend):
        self._backend = backend

    def add(self, survey: Survey) -> None:
        key = str(survey.id)
        if self._backend.get(key) is not None:
            raise InvalidArgumentError(f"Survey with ID {survey.id} already exists.")
        self._backend.put(key, survey_to_dict(survey))
        logger.debug("Stored survey %s (version %d)", survey.id, survey.version)

    def update(self, survey: Survey) -> None:
        key = str(survey.id)
        stored = self._backend.get(key)
        if stored is None:
            raise NotFoundError(f"Survey with ID {survey.id} not found.")

        stored_version = stored.get("version", 0)
        if stored_version != survey.version:
            raise ConcurrencyConflictError(survey.id, survey.version, stored_version)

        data = survey_to_dict(survey)
        data["version"] = survey.version + 1
        self._backend.put(key, data)
        survey.version += 1
        logger.debug("Updated survey %s to version %d", survey.id, survey.version)

    def delete(self, survey_id: uuid.UUID) -> None:
        key = str(survey_id)
        if self._backend.get(key) is None:
            raise NotFoundError(f"Survey with ID {survey_id} not found.")
        self._backend.remove(key)
        logger.debug("Deleted survey %s", survey_id)

    def get_by_id(self, survey_id: uuid.UUID) -> Optional[Survey]:
        data = self._backend.get(str(survey_id))
        return survey_from_dict(data) if data is not None else None

    def get_all(self) -> List[Survey]:
        surveys = [survey_from_dict(d) for d in self._backend.values()]
        surveys.sort(key=lambda s: s.created_at)
        return surveys

    def exists(self, survey_id: uuid.UUID) -> bool:
        return self._backend.get(str(survey_id)) is not None


class SnapshotSubmissionStore:
    """SubmissionStore over any snapshot backend."""

    def __init__(self, backend):
        self._backend = backend

    def add(self, submission: Submission) -> None:
        key = str(submission.id)
        if self._backend.get(key) is not None:
            raise InvalidArgumentError(f"Submission with ID {submission.id} already exists.")
        self._backend.put(key, submission_to_dict(submission))
        logger.debug("Stored submission %s for survey %s", submission.id, submission.survey_id)

    def delete(self, submission_id: uuid.UUID) -> None:
        key = str(submission_id)
        if self._backend.get(key) is None:
            raise NotFoundError(f"Submission with ID {submission_id} not found.")
        self._backend.remove(key)

    def get_by_id(self, submission_id: uuid.UUID) -> Optional[Submission]:
        data = self._backend.get(str(submission_id))
        return submission_from_dict(data) if data is not None else None

    def get_all(self) -> List[Submission]:
        submissions = [submission_from_dict(d) for d in self._backend.values()]
        submissions.sort(key=lambda s: s.submitted_at)
        return submissions

    def get_by_survey_id(self, survey_id: uuid.UUID) -> List[Submission]:
        return [s for s in self.get_all() if s.survey_id == survey_id]

    def purge(self) -> int:
        """Delete every submission; returns how many were removed."""
        ids = [d["id"] for d in self._backend.values()]
        for key in ids:
            self._backend.remove(key)
        logger.info("Purged %d submission(s)", len(ids))
        return len(ids)


class InMemorySurveyStore(SnapshotSurveyStore):
    def __init__(self):
        super().__init__(MemoryBackend())


class InMemorySubmissionStore(SnapshotSubmissionStore):
    def __init__(self):
        super().__init__(MemoryBackend())


class YamlSurveyStore(SnapshotSurveyStore):
    def __init__(self, directory: Union[str, Path]):
        super().__init__(YamlDirectoryBackend(directory))


class YamlSubmissionStore(SnapshotSubmissionStore):
    def __init__(self, directory: Union[str, Path]):
        super().__init__(YamlDirectoryBackend(directory))
