"""Publication aggregate: one publish attempt of one article to one target.

Business rules:
- Transitions follow PUBLICATION_TRANSITIONS; anything else raises.
- completed and cancelled are terminal.
- retry() is only legal from failed while retry_count < max_retries.
- Invariants are checked after every mutation.

The aggregate is not safe under concurrent mutation. Callers guarantee a
single writer per publication and persist through the repository.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Union

from ..constants.status import (
    PUBLICATION_PLATFORMS,
    WORDPRESS_POST_STATUSES,
    PublicationStatus,
    can_transition,
)
from .errors import InvalidStateTransition, InvariantViolation, MaxRetriesExceeded, ValidationError

_logger = logging.getLogger("publishing")

DEFAULT_MAX_RETRIES = 3


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# =============================================================================
# VALUE OBJECTS
# =============================================================================

@dataclass(frozen=True)
class PublicationTarget:
    """Where a publication goes: platform, site and credentials.

    Credentials live in ``configuration`` and are read-only for the
    pipeline.
    """

    platform: str
    site_id: str
    site_url: str
    configuration: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.platform:
            raise ValidationError("Platform must be a non-empty string", field="platform")
        if self.platform not in PUBLICATION_PLATFORMS:
            raise ValidationError(f"Unsupported platform: {self.platform}", field="platform")
        if not self.site_id:
            raise ValidationError("Site ID must be a non-empty string", field="site_id")
        if self.platform == "wordpress":
            self._validate_wordpress()

    def _validate_wordpress(self) -> None:
        if not self.configuration.get("username"):
            raise ValidationError("WordPress username is required", field="username")
        if not self.configuration.get("password"):
            raise ValidationError("WordPress password is required", field="password")
        status = self.configuration.get("status")
        if status is not None and status not in WORDPRESS_POST_STATUSES:
            raise ValidationError(f"Invalid WordPress post status: {status}", field="status")

    @classmethod
    def wordpress(
        cls,
        site_id: str,
        site_url: str,
        username: str,
        password: str,
        status: str = "draft",
        **extra: Any,
    ) -> "PublicationTarget":
        """Build a WordPress target."""
        configuration = {"username": username, "password": password, "status": status}
        configuration.update(extra)
        return cls(platform="wordpress", site_id=site_id, site_url=site_url, configuration=configuration)

    @property
    def username(self) -> str:
        return self.configuration.get("username", "")

    @property
    def password(self) -> str:
        return self.configuration.get("password", "")

    @property
    def post_status(self) -> str:
        return self.configuration.get("status") or "draft"

    def descriptor(self) -> dict[str, Any]:
        """Credential-free description used in events and summaries."""
        return {"platform": self.platform, "site_id": self.site_id, "site_url": self.site_url}

    def to_dict(self) -> dict[str, Any]:
        return {
            "platform": self.platform,
            "site_id": self.site_id,
            "site_url": self.site_url,
            "configuration": dict(self.configuration),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PublicationTarget":
        return cls(
            platform=data["platform"],
            site_id=data["site_id"],
            site_url=data.get("site_url", ""),
            configuration=dict(data.get("configuration") or {}),
        )

    def __str__(self) -> str:
        return f"{self.platform}:{self.site_id}"


@dataclass
class PublicationMetadata:
    """Snapshot of what is being published."""

    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    featured_image_id: int | None = None
    featured_image_url: str | None = None
    tags: list[Any] = field(default_factory=list)
    categories: list[Any] = field(default_factory=list)
    custom_fields: dict[str, Any] = field(default_factory=dict)
    seo_title: str | None = None
    seo_description: str | None = None

    def merged(self, **changes: Any) -> "PublicationMetadata":
        unknown = set(changes) - set(self.__dataclass_fields__)
        if unknown:
            raise ValidationError(f"Unknown metadata fields: {sorted(unknown)}", field="metadata")
        data = asdict(self)
        data.update(changes)
        return PublicationMetadata(**data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PublicationMetadata":
        if not data:
            return cls()
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass(frozen=True)
class PublicationError:
    """Why the last attempt failed and whether it may be retried."""

    code: str
    message: str
    is_retryable: bool = False
    details: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "is_retryable": self.is_retryable,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PublicationError":
        return cls(
            code=data["code"],
            message=data.get("message", ""),
            is_retryable=bool(data.get("is_retryable", False)),
            details=data.get("details"),
            timestamp=_parse_dt(data.get("timestamp")) or _now(),
        )


# =============================================================================
# LIFECYCLE EVENTS
# =============================================================================

@dataclass(frozen=True)
class PublicationStarted:
    publication_id: str
    article_id: str
    target: dict[str, Any]
    started_at: datetime

    event_type = "publication.started"


@dataclass(frozen=True)
class PublicationCompleted:
    publication_id: str
    article_id: str
    target: dict[str, Any]
    external_id: str
    external_url: str | None
    completed_at: datetime

    event_type = "publication.completed"


@dataclass(frozen=True)
class PublicationFailed:
    publication_id: str
    article_id: str
    target: dict[str, Any]
    error: PublicationError
    retry_count: int
    can_retry: bool

    event_type = "publication.failed"


PublicationEvent = Union[PublicationStarted, PublicationCompleted, PublicationFailed]


# =============================================================================
# AGGREGATE
# =============================================================================

class Publication:
    """State machine tracking one publish attempt.

    Create with ``create_immediate`` / ``create_scheduled`` and rebuild from
    storage with ``reconstitute``. All state changes go through the
    transition methods; each one re-checks the invariants.
    """

    def __init__(
        self,
        id: str,
        article_id: str,
        target: PublicationTarget,
        metadata: PublicationMetadata | None = None,
        status: PublicationStatus = PublicationStatus.PENDING,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_count: int = 0,
        external_id: str | None = None,
        external_url: str | None = None,
        error: PublicationError | None = None,
        scheduled_at: datetime | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id
        self.article_id = article_id
        self.target = target
        self._metadata = metadata or PublicationMetadata()
        self._status = status
        self.max_retries = max_retries
        self._retry_count = retry_count
        self._external_id = external_id
        self._external_url = external_url
        self._error = error
        self._scheduled_at = scheduled_at
        self._started_at = started_at
        self._completed_at = completed_at
        self.created_at = created_at or _now()
        self.updated_at = updated_at or self.created_at
        self._events: list[PublicationEvent] = []
        self._check_invariants()

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def create_immediate(
        cls,
        article_id: str,
        target: PublicationTarget,
        metadata: PublicationMetadata | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> "Publication":
        """Create a publication ready to run now."""
        return cls(
            id=str(uuid.uuid4()),
            article_id=article_id,
            target=target,
            metadata=metadata,
            max_retries=max_retries,
        )

    @classmethod
    def create_scheduled(
        cls,
        article_id: str,
        target: PublicationTarget,
        scheduled_at: datetime,
        metadata: PublicationMetadata | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> "Publication":
        """Create a publication that waits for ``scheduled_at``.

        Raises:
            ValidationError: If ``scheduled_at`` is not in the future.
        """
        if scheduled_at.tzinfo is None:
            scheduled_at = scheduled_at.replace(tzinfo=timezone.utc)
        if scheduled_at <= _now():
            raise ValidationError("Scheduled date must be in the future", field="scheduled_at")
        return cls(
            id=str(uuid.uuid4()),
            article_id=article_id,
            target=target,
            metadata=metadata,
            status=PublicationStatus.SCHEDULED,
            max_retries=max_retries,
            scheduled_at=scheduled_at,
        )

    @classmethod
    def reconstitute(cls, data: dict[str, Any]) -> "Publication":
        """Rebuild a publication from its persisted ``to_dict`` form."""
        error = data.get("error")
        return cls(
            id=data["id"],
            article_id=data["article_id"],
            target=PublicationTarget.from_dict(data["target"]),
            metadata=PublicationMetadata.from_dict(data.get("metadata")),
            status=PublicationStatus(data["status"]),
            max_retries=int(data.get("max_retries", DEFAULT_MAX_RETRIES)),
            retry_count=int(data.get("retry_count", 0)),
            external_id=data.get("external_id"),
            external_url=data.get("external_url"),
            error=PublicationError.from_dict(error) if error else None,
            scheduled_at=_parse_dt(data.get("scheduled_at")),
            started_at=_parse_dt(data.get("started_at")),
            completed_at=_parse_dt(data.get("completed_at")),
            created_at=_parse_dt(data.get("created_at")),
            updated_at=_parse_dt(data.get("updated_at")),
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def status(self) -> PublicationStatus:
        return self._status

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def external_id(self) -> str | None:
        return self._external_id

    @property
    def external_url(self) -> str | None:
        return self._external_url

    @property
    def error(self) -> PublicationError | None:
        return self._error

    @property
    def metadata(self) -> PublicationMetadata:
        return self._metadata

    @property
    def scheduled_at(self) -> datetime | None:
        return self._scheduled_at

    @property
    def started_at(self) -> datetime | None:
        return self._started_at

    @property
    def completed_at(self) -> datetime | None:
        return self._completed_at

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _require_transition(self, target: PublicationStatus) -> None:
        if not can_transition(self._status, target):
            raise InvalidStateTransition("publication", self._status.value, target.value)

    def _touch(self) -> None:
        self.updated_at = _now()

    def start(self) -> None:
        """Move to in_progress.

        A scheduled publication whose time has come passes through pending
        first.

        Raises:
            InvalidStateTransition: From any other state, or when scheduled
                and not yet due.
        """
        if self._status == PublicationStatus.SCHEDULED:
            if not self.is_ready_for_execution():
                raise InvalidStateTransition("publication", self._status.value, PublicationStatus.IN_PROGRESS.value)
            self._require_transition(PublicationStatus.PENDING)
            self._status = PublicationStatus.PENDING

        self._require_transition(PublicationStatus.IN_PROGRESS)
        self._status = PublicationStatus.IN_PROGRESS
        self._started_at = _now()
        self._touch()
        self._check_invariants()

        _logger.info(f"PUBLICATION_STARTED | id:{self.id} | article:{self.article_id} | target:{self.target}")
        self._events.append(
            PublicationStarted(self.id, self.article_id, self.target.descriptor(), self._started_at)
        )

    def complete(self, external_id: str, external_url: str | None = None) -> None:
        """Record the target's confirmation.

        Raises:
            ValidationError: If ``external_id`` is empty.
            InvalidStateTransition: If not in progress.
        """
        if not external_id or not str(external_id).strip():
            raise ValidationError("External ID is required to complete a publication", field="external_id")
        self._require_transition(PublicationStatus.COMPLETED)

        self._status = PublicationStatus.COMPLETED
        self._external_id = str(external_id)
        self._external_url = external_url
        self._completed_at = _now()
        self._error = None
        self._touch()
        self._check_invariants()

        _logger.info(
            f"PUBLICATION_COMPLETED | id:{self.id} | external_id:{self._external_id} | url:{external_url}"
        )
        self._events.append(
            PublicationCompleted(
                self.id,
                self.article_id,
                self.target.descriptor(),
                self._external_id,
                external_url,
                self._completed_at,
            )
        )

    def fail(self, error: PublicationError) -> None:
        """Record a failure and move to failed.

        Failure may be recorded from any non-terminal state.

        Raises:
            InvalidStateTransition: If the publication is terminal.
        """
        if self._status.is_terminal():
            raise InvalidStateTransition("publication", self._status.value, PublicationStatus.FAILED.value)

        self._status = PublicationStatus.FAILED
        self._error = error
        self._touch()
        self._check_invariants()

        _logger.warning(
            f"PUBLICATION_FAILED | id:{self.id} | code:{error.code} | retryable:{error.is_retryable} | "
            f"retries:{self._retry_count}/{self.max_retries} | {error.message}"
        )
        self._events.append(
            PublicationFailed(
                self.id,
                self.article_id,
                self.target.descriptor(),
                error,
                self._retry_count,
                self.can_retry(),
            )
        )

    def retry(self) -> None:
        """Return a failed publication to pending.

        Raises:
            InvalidStateTransition: If not failed.
            MaxRetriesExceeded: If the retry budget is spent. State is untouched.
        """
        if self._status != PublicationStatus.FAILED:
            raise InvalidStateTransition("publication", self._status.value, PublicationStatus.PENDING.value)
        if self._retry_count >= self.max_retries:
            raise MaxRetriesExceeded(self._retry_count, self.max_retries)

        self._require_transition(PublicationStatus.PENDING)
        self._retry_count += 1
        self._status = PublicationStatus.PENDING
        self._started_at = None
        self._completed_at = None
        self._touch()
        self._check_invariants()
        _logger.info(f"PUBLICATION_RETRY | id:{self.id} | attempt:{self._retry_count}/{self.max_retries}")

    def cancel(self) -> None:
        """Mark intent to cancel. Does not abort an in-flight call."""
        self._require_transition(PublicationStatus.CANCELLED)
        self._status = PublicationStatus.CANCELLED
        self._touch()
        self._check_invariants()
        _logger.info(f"PUBLICATION_CANCELLED | id:{self.id}")

    def update_metadata(self, **changes: Any) -> None:
        """Merge changes into the metadata snapshot.

        Raises:
            InvalidStateTransition: If the publication is terminal.
        """
        if self._status.is_terminal():
            raise InvalidStateTransition("publication", self._status.value, self._status.value)
        self._metadata = self._metadata.merged(**changes)
        self._touch()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def can_retry(self) -> bool:
        return self._status == PublicationStatus.FAILED and self._retry_count < self.max_retries

    def is_ready_for_execution(self, now: datetime | None = None) -> bool:
        if self._status == PublicationStatus.PENDING:
            return True
        if self._status == PublicationStatus.SCHEDULED and self._scheduled_at:
            return self._scheduled_at <= (now or _now())
        return False

    def is_terminal(self) -> bool:
        return self._status.is_terminal()

    def duration(self) -> timedelta | None:
        """Time since start, or start-to-completion once completed."""
        if not self._started_at:
            return None
        return (self._completed_at or _now()) - self._started_at

    def pull_events(self) -> list[PublicationEvent]:
        """Return and clear pending lifecycle events."""
        events, self._events = self._events, []
        return events

    # ------------------------------------------------------------------
    # Invariants & serialization
    # ------------------------------------------------------------------

    def _check_invariants(self) -> None:
        if not self.article_id or not self.article_id.strip():
            raise InvariantViolation("Publication must have a valid article ID")
        if self._retry_count < 0:
            raise InvariantViolation("Retry count cannot be negative")
        if self._retry_count > self.max_retries:
            raise InvariantViolation("Retry count cannot exceed maximum retries")
        if self._status == PublicationStatus.COMPLETED:
            if not self._external_id:
                raise InvariantViolation("Completed publications must have an external ID")
            if not self._completed_at:
                raise InvariantViolation("Completed publications must have a completion time")
        if self._status == PublicationStatus.SCHEDULED and not self._scheduled_at:
            raise InvariantViolation("Scheduled publications must have a scheduled date")
        if self._status == PublicationStatus.IN_PROGRESS and not self._started_at:
            raise InvariantViolation("In-progress publications must have a start time")

    def summary(self) -> dict[str, Any]:
        """Credential-free view for listings."""
        duration = self.duration()
        return {
            "id": self.id,
            "article_id": self.article_id,
            "target": self.target.descriptor(),
            "status": self._status.value,
            "external_id": self._external_id,
            "external_url": self._external_url,
            "retry_count": self._retry_count,
            "max_retries": self.max_retries,
            "can_retry": self.can_retry(),
            "scheduled_at": _iso(self._scheduled_at),
            "started_at": _iso(self._started_at),
            "completed_at": _iso(self._completed_at),
            "duration_seconds": duration.total_seconds() if duration else None,
            "error": self._error.to_dict() if self._error else None,
        }

    def to_dict(self) -> dict[str, Any]:
        """Full persisted state, inverse of ``reconstitute``."""
        return {
            "id": self.id,
            "article_id": self.article_id,
            "target": self.target.to_dict(),
            "status": self._status.value,
            "metadata": self._metadata.to_dict(),
            "external_id": self._external_id,
            "external_url": self._external_url,
            "error": self._error.to_dict() if self._error else None,
            "retry_count": self._retry_count,
            "max_retries": self.max_retries,
            "scheduled_at": _iso(self._scheduled_at),
            "started_at": _iso(self._started_at),
            "completed_at": _iso(self._completed_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"Publication(id={self.id!r}, article={self.article_id!r}, status={self._status.value})"
