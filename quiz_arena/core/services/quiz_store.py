"""Persistence for quizzes, notes, and results with live subscriptions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from enum import Enum
import json
import logging
from pathlib import Path
from threading import RLock
from typing import Any
from uuid import uuid4

from quiz_arena.constants.quiz_constants import MAX_DURATION_MINUTES, OPTIONS_PER_QUESTION
from quiz_arena.core.errors import PersistenceError, ValidationError
from quiz_arena.core.models import Difficulty, Note, Question, Quiz, Result

logger = logging.getLogger(__name__)


class Collection(str, Enum):
    QUIZZES = "quizzes"
    NOTES = "notes"
    RESULTS = "results"


SnapshotListener = Callable[[list[Any]], None]


class Subscription:
    """Live view over one collection.

    Listeners receive the full ordered snapshot on every change. Iterating the
    subscription yields the current snapshot on each step and never ends;
    ``poll()`` only returns a snapshot when something changed since the last
    one handed out, and ``restart()`` makes the next poll deliver again.
    """

    def __init__(
        self,
        store: QuizStore,
        collection: Collection,
        listener: SnapshotListener | None = None,
    ) -> None:
        self._store = store
        self.collection = collection
        self._listener = listener
        self._seen_version: int = -1
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Subscription:
        return self

    def __next__(self) -> list[Any]:
        version, snapshot = self._store._snapshot_with_version(self.collection)
        self._seen_version = version
        return snapshot

    def poll(self) -> list[Any] | None:
        version, snapshot = self._store._snapshot_with_version(self.collection)
        if version == self._seen_version:
            return None
        self._seen_version = version
        return snapshot

    def restart(self) -> None:
        self._seen_version = -1

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._store._unsubscribe(self)

    @property
    def has_listener(self) -> bool:
        return self._listener is not None

    def _deliver(self, snapshot: list[Any]) -> None:
        if self._listener is not None and not self._closed:
            self._listener(snapshot)


class QuizStore:
    """Append-oriented store for quizzes, notes, and results.

    Everything lives in memory; when ``data_path`` is given, the whole store is
    loaded from that JSON file on construction and rewritten after every
    mutation. A failed write leaves the in-memory state as it was.
    """

    def __init__(self, data_path: Path | None = None) -> None:
        self._lock = RLock()
        self._data_path = data_path
        self._quizzes: dict[str, Quiz] = {}
        self._notes: dict[str, Note] = {}
        self._results: dict[str, Result] = {}
        self._versions: dict[Collection, int] = {collection: 0 for collection in Collection}
        self._subscriptions: list[Subscription] = []
        if data_path is not None and data_path.exists():
            self._load()

    # --- Quizzes ---

    def add_quiz(self, quiz: Quiz) -> Quiz:
        prepared = replace(validate_quiz(quiz), id=uuid4().hex)
        self._mutate(Collection.QUIZZES, lambda: self._quizzes.__setitem__(prepared.id, prepared))
        logger.info("Published quiz %s (%s questions)", prepared.id, prepared.question_count)
        return prepared

    def update_quiz(self, quiz: Quiz) -> Quiz:
        prepared = validate_quiz(quiz)
        with self._lock:
            if prepared.id not in self._quizzes:
                raise LookupError(f"Quiz {prepared.id} not found")
        self._mutate(Collection.QUIZZES, lambda: self._quizzes.__setitem__(prepared.id, prepared))
        return prepared

    def delete_quiz(self, quiz_id: str) -> None:
        with self._lock:
            if quiz_id not in self._quizzes:
                raise LookupError(f"Quiz {quiz_id} not found")
        self._mutate(Collection.QUIZZES, lambda: self._quizzes.pop(quiz_id))

    def get_quiz(self, quiz_id: str) -> Quiz:
        with self._lock:
            try:
                return self._quizzes[quiz_id]
            except KeyError:
                raise LookupError(f"Quiz {quiz_id} not found") from None

    def list_quizzes(self) -> list[Quiz]:
        return self._snapshot(Collection.QUIZZES)

    # --- Notes ---

    def add_note(self, note: Note) -> Note:
        if not note.title.strip() or not note.file_data:
            raise ValidationError("Please provide a title and a file.")
        prepared = replace(note, id=uuid4().hex, title=note.title.strip())
        self._write_note_payload(prepared)
        try:
            self._mutate(Collection.NOTES, lambda: self._notes.__setitem__(prepared.id, prepared))
        except PersistenceError:
            self._remove_note_payload(prepared.id)
            raise
        return prepared

    def delete_note(self, note_id: str) -> None:
        with self._lock:
            if note_id not in self._notes:
                raise LookupError(f"Note {note_id} not found")
        self._mutate(Collection.NOTES, lambda: self._notes.pop(note_id))
        self._remove_note_payload(note_id)

    def get_note(self, note_id: str) -> Note:
        with self._lock:
            try:
                return self._notes[note_id]
            except KeyError:
                raise LookupError(f"Note {note_id} not found") from None

    def list_notes(self) -> list[Note]:
        return self._snapshot(Collection.NOTES)

    # --- Results ---

    def add_result(self, result: Result) -> Result:
        stored = replace(result, id=uuid4().hex)
        self._mutate(Collection.RESULTS, lambda: self._results.__setitem__(stored.id, stored))
        return stored

    def list_results(self) -> list[Result]:
        return self._snapshot(Collection.RESULTS)

    def results_for_quiz(self, quiz_id: str) -> list[Result]:
        return [result for result in self.list_results() if result.quiz_id == quiz_id]

    # --- Subscriptions ---

    def subscribe(
        self,
        collection: Collection,
        listener: SnapshotListener | None = None,
    ) -> Subscription:
        subscription = Subscription(self, Collection(collection), listener)
        with self._lock:
            self._subscriptions.append(subscription)
        if listener is not None:
            subscription._deliver(next(subscription))
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _notify(self, collection: Collection) -> None:
        with self._lock:
            targets = [
                s for s in self._subscriptions if s.collection is collection and s.has_listener
            ]
        if not targets:
            return
        # Pull cursors only move on poll() or next().
        snapshot = self._snapshot(collection)
        for subscription in targets:
            subscription._deliver(list(snapshot))

    # --- Internals ---

    def _snapshot(self, collection: Collection) -> list[Any]:
        return self._snapshot_with_version(collection)[1]

    def _snapshot_with_version(self, collection: Collection) -> tuple[int, list[Any]]:
        with self._lock:
            version = self._versions[collection]
            if collection is Collection.QUIZZES:
                items, key = list(self._quizzes.values()), _by_created_at
            elif collection is Collection.NOTES:
                items, key = list(self._notes.values()), _by_created_at
            else:
                items, key = list(self._results.values()), _by_submitted_at
        return version, sorted(items, key=key, reverse=True)

    def _mutate(self, collection: Collection, change: Callable[[], object]) -> None:
        with self._lock:
            backup = (dict(self._quizzes), dict(self._notes), dict(self._results))
            change()
            try:
                self._save()
            except PersistenceError:
                self._quizzes, self._notes, self._results = backup
                raise
            self._versions[collection] += 1
        self._notify(collection)

    def _load(self) -> None:
        try:
            document = json.loads(self._data_path.read_text(encoding="utf-8"))
            self._quizzes = {q["id"]: _quiz_from_dict(q) for q in document.get("quizzes", [])}
            self._notes = {
                n["id"]: _note_from_dict(n, self._read_note_payload(n)) for n in document.get("notes", [])
            }
            self._results = {r["id"]: _result_from_dict(r) for r in document.get("results", [])}
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.exception("Failed to load quiz store from %s", self._data_path)
            raise PersistenceError(f"Could not read {self._data_path}: {exc}") from exc

    def _save(self) -> None:
        if self._data_path is None:
            return
        document = {
            "quizzes": [_quiz_to_dict(q) for q in self._quizzes.values()],
            "notes": [_note_to_dict(n) for n in self._notes.values()],
            "results": [_result_to_dict(r) for r in self._results.values()],
        }
        temp_path = self._data_path.with_suffix(self._data_path.suffix + ".tmp")
        try:
            self._data_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
            temp_path.replace(self._data_path)
        except OSError as exc:
            logger.exception("Failed to write quiz store to %s", self._data_path)
            raise PersistenceError(f"Could not write {self._data_path}: {exc}") from exc

    # Note contents live in one file per note beside the JSON document.
    def _note_payload_path(self, note_id: str) -> Path:
        return self._data_path.with_name(f"{self._data_path.stem}_notes") / f"{note_id}.b64"

    def _read_note_payload(self, data: dict[str, Any]) -> str:
        if "file_data" in data:
            return data["file_data"]
        return self._note_payload_path(data["id"]).read_text(encoding="ascii")

    def _write_note_payload(self, note: Note) -> None:
        if self._data_path is None:
            return
        payload_path = self._note_payload_path(note.id)
        try:
            payload_path.parent.mkdir(parents=True, exist_ok=True)
            payload_path.write_text(note.file_data, encoding="ascii")
        except OSError as exc:
            logger.exception("Failed to write note file %s", payload_path)
            raise PersistenceError(f"Could not write {payload_path}: {exc}") from exc

    def _remove_note_payload(self, note_id: str) -> None:
        if self._data_path is None:
            return
        try:
            self._note_payload_path(note_id).unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove note file for %s", note_id)


def validate_quiz(quiz: Quiz) -> Quiz:
    """Validate and normalize a quiz before it is published."""
    title = quiz.title.strip()
    if not title:
        raise ValidationError("Quiz title must not be empty.")
    if not quiz.questions:
        raise ValidationError("Quiz must contain at least one question.")
    duration = quiz.duration_minutes
    if duration is not None and not 0 < duration <= MAX_DURATION_MINUTES:
        raise ValidationError(f"Duration must be between 1 and {MAX_DURATION_MINUTES} minutes.")
    questions = tuple(_validate_question(question) for question in quiz.questions)
    return replace(quiz, title=title, questions=questions)


def _validate_question(question: Question) -> Question:
    text = question.text.strip()
    if not text:
        raise ValidationError("Question text must not be empty.")
    if len(question.options) != OPTIONS_PER_QUESTION:
        raise ValidationError("Each question must have exactly four options.")
    options = tuple(option.strip() for option in question.options)
    if any(not option for option in options):
        raise ValidationError("Option text cannot be empty.")
    if not 0 <= question.correct_index < len(options):
        raise ValidationError("Correct option index must be between 0 and 3.")
    explanation = question.explanation.strip() if question.explanation else None
    return Question(text=text, options=options, correct_index=question.correct_index, explanation=explanation or None)


def _by_created_at(item: Quiz | Note) -> datetime:
    return item.created_at


def _by_submitted_at(item: Result) -> datetime:
    return item.submitted_at


def _quiz_to_dict(quiz: Quiz) -> dict[str, Any]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "subject": quiz.subject,
        "difficulty": quiz.difficulty.value,
        "duration_minutes": quiz.duration_minutes,
        "created_at": quiz.created_at.isoformat(),
        "questions": [
            {
                "text": q.text,
                "options": list(q.options),
                "correct_index": q.correct_index,
                "explanation": q.explanation,
            }
            for q in quiz.questions
        ],
    }


def _quiz_from_dict(data: dict[str, Any]) -> Quiz:
    return Quiz(
        id=data["id"],
        title=data["title"],
        subject=data.get("subject"),
        difficulty=Difficulty(data.get("difficulty", Difficulty.MEDIUM.value)),
        duration_minutes=data.get("duration_minutes"),
        created_at=datetime.fromisoformat(data["created_at"]),
        questions=tuple(
            Question(
                text=q["text"],
                options=tuple(q["options"]),
                correct_index=q["correct_index"],
                explanation=q.get("explanation"),
            )
            for q in data["questions"]
        ),
    )


def _note_to_dict(note: Note) -> dict[str, Any]:
    return {
        "id": note.id,
        "title": note.title,
        "description": note.description,
        "file_name": note.file_name,
        "mime_type": note.mime_type,
        "created_at": note.created_at.isoformat(),
    }


def _note_from_dict(data: dict[str, Any], file_data: str) -> Note:
    return Note(
        id=data["id"],
        title=data["title"],
        description=data.get("description", ""),
        file_name=data["file_name"],
        file_data=file_data,
        mime_type=data["mime_type"],
        created_at=datetime.fromisoformat(data["created_at"]),
    )


def _result_to_dict(result: Result) -> dict[str, Any]:
    return {
        "id": result.id,
        "quiz_id": result.quiz_id,
        "student_name": result.student_name,
        "score": result.score,
        "total": result.total,
        "submitted_at": result.submitted_at.isoformat(),
    }


def _result_from_dict(data: dict[str, Any]) -> Result:
    return Result(
        id=data["id"],
        quiz_id=data["quiz_id"],
        student_name=data["student_name"],
        score=data["score"],
        total=data["total"],
        submitted_at=datetime.fromisoformat(data["submitted_at"]),
    )
