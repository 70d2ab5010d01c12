"""Single-writer lock for a repository.

At most one release pipeline (or cache write) runs per repository. The lock
is a JSON file at the repository root describing its holder; a lock whose
holder is gone or that outlived the grace period is stale and replaced.
"""

import getpass
import json
import logging
import os
import socket
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from types import TracebackType
from typing import Any

from autokit.exceptions import ReleaseLocked

logger = logging.getLogger(__name__)

LOCK_FILE_NAME = ".automation.lock"
DEFAULT_GRACE_PERIOD = 3600


@dataclass(frozen=True)
class LockPayload:
    pid: int
    host: str
    user: str
    run_id: str
    acquired_at: str

    def to_json(self) -> str:
        return json.dumps(asdict(self), sort_keys=True)

    @classmethod
    def from_raw(cls, raw: str) -> "LockPayload | None":
        try:
            data: dict[str, Any] = json.loads(raw)
            return cls(
                pid=int(data["pid"]),
                host=str(data["host"]),
                user=str(data.get("user", "?")),
                run_id=str(data["run_id"]),
                acquired_at=str(data["acquired_at"]),
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            return None

    def age_seconds(self, now: datetime | None = None) -> float:
        now = now or datetime.now(timezone.utc)
        try:
            acquired = datetime.fromisoformat(self.acquired_at)
        except ValueError:
            return float("inf")
        if acquired.tzinfo is None:
            acquired = acquired.replace(tzinfo=timezone.utc)
        return (now - acquired).total_seconds()


def _pid_active(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
        return True
    except ProcessLookupError:
        return False
    except PermissionError:
        return True


def _user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


class RepositoryLock:
    """Exclusive lock on a repository's automation state.

    Usable as a context manager. Acquiring is not reentrant across
    instances; hand the held instance to collaborators that need to
    write under it (see ConfigStore).
    """

    def __init__(
        self,
        project_root: Path,
        grace_period: int = DEFAULT_GRACE_PERIOD,
        run_id: str | None = None,
    ) -> None:
        self.path = project_root / LOCK_FILE_NAME
        self.grace_period = grace_period
        self.run_id = run_id or uuid.uuid4().hex[:12]
        self._payload: LockPayload | None = None

    @property
    def held(self) -> bool:
        return self._payload is not None

    def _is_stale(self, holder: LockPayload) -> bool:
        if holder.age_seconds() > self.grace_period:
            return True
        if holder.host == socket.gethostname() and not _pid_active(holder.pid):
            return True
        return False

    def _try_create(self, payload: LockPayload) -> bool:
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload.to_json() + "\n")
        return True

    def acquire(self) -> LockPayload:
        """Take the lock, replacing a stale one.

        Raises:
            ReleaseLocked: If another live holder owns the lock
        """
        if self._payload is not None:
            return self._payload

        payload = LockPayload(
            pid=os.getpid(),
            host=socket.gethostname(),
            user=_user(),
            run_id=self.run_id,
            acquired_at=datetime.now(timezone.utc).isoformat(),
        )

        for _ in range(2):
            if self._try_create(payload):
                self._payload = payload
                logger.debug("Lock acquired: %s (run %s)", self.path, self.run_id)
                return payload

            try:
                raw = self.path.read_text(encoding="utf-8")
            except FileNotFoundError:
                continue  # released between our attempts
            holder = LockPayload.from_raw(raw)
            if holder is not None and not self._is_stale(holder):
                raise ReleaseLocked(
                    "Another automation run holds the repository lock",
                    details=(
                        f"pid={holder.pid} host={holder.host} user={holder.user} "
                        f"run={holder.run_id} since {holder.acquired_at}"
                    ),
                    fix_hint=f"Wait for it to finish, or delete {self.path.name} if it is dead",
                )
            logger.warning("Replacing stale lock: %s", raw.strip() or "<empty>")
            self.path.unlink(missing_ok=True)

        raise ReleaseLocked(
            "Could not acquire the repository lock",
            details="The lock file was recreated concurrently",
        )

    def release(self) -> None:
        """Drop the lock if this instance still owns it."""
        if self._payload is None:
            return
        try:
            holder = LockPayload.from_raw(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            holder = None
        if holder is not None and holder.run_id == self.run_id:
            self.path.unlink(missing_ok=True)
            logger.debug("Lock released: %s", self.path)
        self._payload = None

    def __enter__(self) -> "RepositoryLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
