import uuid
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bunktrack.core import ConfigurationError
from bunktrack.database.db import Base, make_session_factory
from bunktrack.database.models import SubjectRecord
from bunktrack.engine.attendance import AttendanceCalculator, AttendanceStats, InvalidInputError
from bunktrack.engine.stream import app_logger


ATTENDED_POLICIES = ("allow", "reject", "clamp")


class SubjectNotFoundError(KeyError):
    """Raised when no subject exists for the given id."""

    def __init__(self, subject_id: str) -> None:
        super().__init__(subject_id)
        self.subject_id = subject_id

    def __str__(self) -> str:
        return f"Subject not found: {self.subject_id}"


@dataclass
class Subject:
    id: str
    subject_name: str
    total: int
    attended: int
    required_percent: float
    created_at: datetime
    updated_at: datetime

    @property
    def stats(self) -> AttendanceStats:
        # Recomputed on every read, never stored
        return AttendanceCalculator.compute(self.attended, self.total, self.required_percent)


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def validate_subject(subject_name: Any, total: Any, attended: Any, required_percent: Any) -> None:
    """Raise InvalidInputError unless the fields form a usable subject."""
    if not isinstance(subject_name, str) or not subject_name.strip():
        raise InvalidInputError("subjectName must be a non-empty string")
    if not _is_count(total):
        raise InvalidInputError(f"total must be a non-negative integer, got {total!r}")
    if not _is_count(attended):
        raise InvalidInputError(f"attended must be a non-negative integer, got {attended!r}")
    if (
        isinstance(required_percent, bool)
        or not isinstance(required_percent, (int, float))
        or not 0 < required_percent <= 100
    ):
        raise InvalidInputError(
            f"requiredPercent must be in (0, 100], got {required_percent!r}"
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SubjectStore:
    """Thread-safe in-memory subject collection."""

    def __init__(self, policy: str = "allow") -> None:
        if policy not in ATTENDED_POLICIES:
            raise ConfigurationError(
                f"Unknown attended/total policy '{policy}'. "
                f"Expected one of: {list(ATTENDED_POLICIES)}"
            )
        self.policy = policy
        self._subjects: Dict[str, Subject] = {}
        self._lock = threading.Lock()

    def _apply_policy(self, total: int, attended: int) -> int:
        if attended <= total or self.policy == "allow":
            return attended
        if self.policy == "clamp":
            app_logger.debug(f"Clamping attended {attended} to total {total}")
            return total
        raise InvalidInputError(
            f"Attended classes ({attended}) cannot be more than total classes ({total})"
        )

    def _prepare(
        self, subject_name: str, total: int, attended: int, required_percent: float
    ) -> int:
        validate_subject(subject_name, total, attended, required_percent)
        return self._apply_policy(total, attended)

    def list(self) -> List[Subject]:
        with self._lock:
            subjects = list(reversed(self._subjects.values()))
        # Newest first; insertion order breaks timestamp ties
        return sorted(subjects, key=lambda subject: subject.created_at, reverse=True)

    def get(self, subject_id: str) -> Subject:
        with self._lock:
            subject = self._subjects.get(subject_id)
        if subject is None:
            raise SubjectNotFoundError(subject_id)
        return subject

    def create(
        self, subject_name: str, total: int, attended: int, required_percent: float
    ) -> Subject:
        attended = self._prepare(subject_name, total, attended, required_percent)
        now = _utcnow()
        subject = Subject(
            id=uuid.uuid4().hex,
            subject_name=subject_name,
            total=total,
            attended=attended,
            required_percent=required_percent,
            created_at=now,
            updated_at=now,
        )

        with self._lock:
            self._subjects[subject.id] = subject

        app_logger.info(f"Created subject {subject.id} ({subject_name})")
        return subject

    def update(
        self,
        subject_id: str,
        subject_name: str,
        total: int,
        attended: int,
        required_percent: float,
    ) -> Subject:
        attended = self._prepare(subject_name, total, attended, required_percent)

        with self._lock:
            current = self._subjects.get(subject_id)
            if current is None:
                raise SubjectNotFoundError(subject_id)

            subject = replace(
                current,
                subject_name=subject_name,
                total=total,
                attended=attended,
                required_percent=required_percent,
                updated_at=_utcnow(),
            )
            self._subjects[subject_id] = subject

        app_logger.info(f"Updated subject {subject_id}")
        return subject

    def delete(self, subject_id: str) -> None:
        with self._lock:
            if self._subjects.pop(subject_id, None) is None:
                raise SubjectNotFoundError(subject_id)

        app_logger.info(f"Deleted subject {subject_id}")


class SqlSubjectStore(SubjectStore):
    """Subject collection kept in a SQL database through SQLAlchemy."""

    def __init__(self, database_url: str, policy: str = "allow") -> None:
        super().__init__(policy)
        try:
            self.engine, self.SessionLocal = make_session_factory(database_url)
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as error:
            raise ConfigurationError(f"Failed to open subject database: {error}")

        self._check_existing()

    def _check_existing(self) -> None:
        with self._session() as db:
            records = db.query(SubjectRecord).all()
            for record in records:
                try:
                    self._to_subject(record)
                except InvalidInputError as error:
                    raise ConfigurationError(
                        f"Malformed subject record {record.id!r} in database: {error}"
                    )
        app_logger.info(f"Loaded {len(records)} subjects from database")

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def _to_subject(record: SubjectRecord) -> Subject:
        validate_subject(
            record.subject_name, record.total, record.attended, record.required_percent
        )
        return Subject(
            id=record.id,
            subject_name=record.subject_name,
            total=record.total,
            attended=record.attended,
            required_percent=record.required_percent,
            created_at=_as_utc(record.created_at),
            updated_at=_as_utc(record.updated_at),
        )

    @staticmethod
    def _find(db: Session, subject_id: str) -> SubjectRecord:
        record = db.query(SubjectRecord).filter(SubjectRecord.id == subject_id).first()
        if record is None:
            raise SubjectNotFoundError(subject_id)
        return record

    def list(self) -> List[Subject]:
        with self._session() as db:
            records = db.query(SubjectRecord).order_by(SubjectRecord.seq.desc()).all()
            return [self._to_subject(record) for record in records]

    def get(self, subject_id: str) -> Subject:
        with self._session() as db:
            return self._to_subject(self._find(db, subject_id))

    def create(
        self, subject_name: str, total: int, attended: int, required_percent: float
    ) -> Subject:
        attended = self._prepare(subject_name, total, attended, required_percent)
        now = _utcnow()

        with self._session() as db:
            record = SubjectRecord(
                id=uuid.uuid4().hex,
                subject_name=subject_name,
                total=total,
                attended=attended,
                required_percent=required_percent,
                created_at=now,
                updated_at=now,
            )
            db.add(record)
            db.flush()
            subject = self._to_subject(record)

        app_logger.info(f"Created subject {subject.id} ({subject_name})")
        return subject

    def update(
        self,
        subject_id: str,
        subject_name: str,
        total: int,
        attended: int,
        required_percent: float,
    ) -> Subject:
        attended = self._prepare(subject_name, total, attended, required_percent)

        with self._session() as db:
            record = self._find(db, subject_id)
            record.subject_name = subject_name
            record.total = total
            record.attended = attended
            record.required_percent = required_percent
            record.updated_at = _utcnow()
            db.flush()
            subject = self._to_subject(record)

        app_logger.info(f"Updated subject {subject_id}")
        return subject

    def delete(self, subject_id: str) -> None:
        with self._session() as db:
            db.delete(self._find(db, subject_id))

        app_logger.info(f"Deleted subject {subject_id}")


def create_store(policy: str = "allow", database_url: Optional[str] = None) -> SubjectStore:
    if database_url:
        return SqlSubjectStore(database_url, policy=policy)
    return SubjectStore(policy)
