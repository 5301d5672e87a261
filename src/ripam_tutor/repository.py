"""Question bank access.

The selection functions depend on the QuestionRepository interface rather
than on where the questions come from:

- FileQuestionRepository: JSON/YAML bank files on disk
- InMemoryQuestionRepository: questions built in code (tests, embedding)
"""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import yaml

from ripam_tutor.models import AnswerOption, QuestionRecord, Subject

logger = logging.getLogger(__name__)

INDEX_FILE = "index.json"


class QuestionBankError(Exception):
    """A bank or index file could not be parsed."""


class QuestionRepository(ABC):
    """Read-only access to subjects and their question banks."""

    @abstractmethod
    def get_questions_by_subject(self, subject_id: str) -> list[QuestionRecord]:
        """Return the questions for a subject, in a stable order."""

    @abstractmethod
    def get_subject_index(self) -> list[Subject]:
        """Return every subject with its exam quota."""

    def get_subject(self, subject_id: str) -> Subject | None:
        for subject in self.get_subject_index():
            if subject.id == subject_id:
                return subject
        return None

    def situational_subject_ids(self) -> frozenset:
        return frozenset(s.id for s in self.get_subject_index() if s.is_situational)


class InMemoryQuestionRepository(QuestionRepository):
    def __init__(self, subjects: list[Subject], questions: list[QuestionRecord]):
        self._subjects = list(subjects)
        self._questions = {}
        for question in questions:
            self._questions.setdefault(question.subject, []).append(question)

    def get_questions_by_subject(self, subject_id: str) -> list[QuestionRecord]:
        return list(self._questions.get(subject_id, []))

    def get_subject_index(self) -> list[Subject]:
        return list(self._subjects)


def read_data_file(path: Path) -> dict:
    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        else:
            data = json.loads(path.read_text(encoding="utf-8"))
    except (ValueError, yaml.YAMLError) as e:
        raise QuestionBankError(f"Cannot parse {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise QuestionBankError(f"{path.name} must contain a mapping at top level")
    return data


def parse_option(raw: dict) -> AnswerOption:
    return AnswerOption(
        id=str(raw["id"]),
        text=raw.get("text", ""),
        correct=bool(raw.get("correct", False)),
        effectiveness=raw.get("effectiveness"),
    )


def parse_question(raw: dict, subject_id: str) -> QuestionRecord:
    try:
        return QuestionRecord(
            id=str(raw["id"]),
            subject=subject_id,
            text=raw["text"],
            options=tuple(parse_option(o) for o in raw.get("options", [])),
            explanation=raw.get("explanation") or "",
        )
    except (KeyError, TypeError) as e:
        raise QuestionBankError(f"Malformed question in {subject_id}: {e}") from e


def parse_subject(raw: dict) -> Subject:
    try:
        return Subject(
            id=str(raw["id"]),
            name=raw.get("name", raw["id"]),
            quota=int(raw.get("exam_questions", 0)),
            category=raw.get("category", ""),
            file=raw.get("file", f"{raw['id']}.json"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise QuestionBankError(f"Malformed subject entry: {e}") from e


class FileQuestionRepository(QuestionRepository):
    """Bank files on disk: index.json plus one file per subject.

    Loaded files are cached on the instance for its lifetime.
    """

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)
        self._index = None
        self._banks = {}

    def get_subject_index(self) -> list[Subject]:
        if self._index is None:
            data = read_data_file(self.data_dir / INDEX_FILE)
            self._index = [parse_subject(s) for s in data.get("subjects", [])]
            logger.debug("Loaded index with %d subjects", len(self._index))
        return list(self._index)

    def get_questions_by_subject(self, subject_id: str) -> list[QuestionRecord]:
        if subject_id in self._banks:
            return list(self._banks[subject_id])

        subject = self.get_subject(subject_id)
        path = self.data_dir / (subject.file if subject else f"{subject_id}.json")
        if not path.exists():
            logger.warning("No question bank for subject %s at %s", subject_id, path)
            self._banks[subject_id] = []
            return []

        data = read_data_file(path)
        # Older bank files carry "id" instead of "subject"
        bank_subject = data.get("subject") or data.get("id")
        if bank_subject and str(bank_subject) != subject_id:
            logger.warning("Bank %s declares subject %s, loading it as %s", path.name, bank_subject, subject_id)
        questions = [parse_question(q, subject_id) for q in data.get("questions", [])]
        self._banks[subject_id] = questions
        logger.debug("Loaded %d questions for %s", len(questions), subject_id)
        return list(questions)

    def clear_cache(self) -> None:
        self._index = None
        self._banks = {}
