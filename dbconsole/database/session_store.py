"""
Session Store - the credential broker.

A session binds an opaque, unguessable token to a validated connection
descriptor. Clients only ever hold the token; the descriptor (and its
password) stays server-side, in memory and in an encrypted file that
lets sessions survive a restart.

Lifecycle per session:

    pending validation -> active -> expired | revoked

Features:
- Descriptor validation with a hard timeout before anything is stored
- Lazy expiry on read plus a periodic background sweep
- A brand-new adapter for every operation (adapters are never shared)
- Per-session cache of table metadata, refreshed on demand
"""
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from dbconsole.core.config import Settings
from dbconsole.core.crypto import SessionCipher, resolve_encryption_key
from dbconsole.core.exceptions import (
    ConnectionTestFailed,
    ConsoleException,
    QueryTimeoutError,
    SessionExpiredError,
    SessionNotFoundError,
)
from dbconsole.core.logging_config import get_logger
from dbconsole.database.adapters import DatabaseAdapter
from dbconsole.database.execution import run_with_timeout
from dbconsole.database.factory import AdapterFactory
from dbconsole.database.models import (
    ConnectionDescriptor,
    SessionInfo,
    TableMetadata,
)
from dbconsole.database.session_storage import SessionFileStore

logger = get_logger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)
DEFAULT_VALIDATION_TIMEOUT_SECONDS = 10.0
DEFAULT_SWEEP_INTERVAL_SECONDS = 300


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SessionRecord:
    """Everything the store keeps for one session. Never leaves the store."""
    descriptor: ConnectionDescriptor
    session: SessionInfo
    table_metadata: Optional[Dict[str, TableMetadata]] = None
    connection: Optional[DatabaseAdapter] = None

    def to_persisted(self) -> Dict[str, Any]:
        return {
            "descriptor": self.descriptor.to_dict(),
            "session": self.session.to_dict(),
            "table_metadata": (
                {name: meta.to_dict() for name, meta in self.table_metadata.items()}
                if self.table_metadata is not None
                else None
            ),
        }

    @classmethod
    def from_persisted(cls, data: Dict[str, Any]) -> "SessionRecord":
        raw_metadata = data.get("table_metadata")
        return cls(
            descriptor=ConnectionDescriptor.from_dict(data["descriptor"]),
            session=SessionInfo.from_dict(data["session"]),
            table_metadata=(
                {name: TableMetadata.from_dict(meta) for name, meta in raw_metadata.items()}
                if raw_metadata is not None
                else None
            ),
        )


class SessionStore:
    """
    Owns every session record.

    Thread-safe: the in-memory map is guarded by one lock, held only for
    map access and the small file writes that must stay consistent with
    it. Database I/O always happens outside the lock.

    Example:
        >>> store = SessionStore(SessionFileStore(path, cipher))
        >>> info = store.create_session(descriptor)
        >>> adapter = store.get_connection(info.session_id)
        >>> with adapter:
        ...     adapter.get_tables()
    """

    def __init__(
        self,
        storage: SessionFileStore,
        factory: Optional[AdapterFactory] = None,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        validation_timeout_seconds: float = DEFAULT_VALIDATION_TIMEOUT_SECONDS,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
        load_existing: bool = True,
    ):
        """
        Initialize the store.

        Args:
            storage: Encrypted file storage for session records
            factory: Adapter factory (a default one when omitted)
            ttl: Fixed session lifetime from creation
            validation_timeout_seconds: Cutoff for validating descriptors
            sweep_interval_seconds: Period of the background sweep
            clock: Source of timezone-aware "now"
            load_existing: Reload persisted sessions on construction
        """
        self.storage = storage
        self.factory = factory or AdapterFactory()
        self.ttl = ttl
        self.validation_timeout_seconds = validation_timeout_seconds
        self._clock = clock

        self._sessions: Dict[str, SessionRecord] = {}
        self._lock = threading.RLock()
        self._sweeper = SessionSweeper(self, sweep_interval_seconds)

        if load_existing:
            self._load_persisted()

        logger.info(
            f"SessionStore initialized: ttl={ttl}, sessions={len(self._sessions)}, "
            f"dir={storage.directory}"
        )

    @classmethod
    def from_settings(cls, settings: Settings, factory: Optional[AdapterFactory] = None) -> "SessionStore":
        """Build the store the application runs with."""
        key = resolve_encryption_key(settings.session_encryption_key, settings.session_key_file)
        storage = SessionFileStore(settings.sessions_dir, SessionCipher(key))
        return cls(
            storage=storage,
            factory=factory or AdapterFactory(proxy_timeout_seconds=settings.proxy_request_timeout_seconds),
            ttl=timedelta(hours=settings.session_ttl_hours),
            validation_timeout_seconds=settings.session_validation_timeout_seconds,
            sweep_interval_seconds=settings.session_sweep_interval_seconds,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background expiry sweep."""
        self._sweeper.start()

    def stop(self) -> None:
        """Stop the background expiry sweep."""
        self._sweeper.stop()

    @property
    def sweeper(self) -> "SessionSweeper":
        return self._sweeper

    def _now(self) -> datetime:
        return self._clock()

    def _load_persisted(self) -> None:
        """Reload sessions from disk, deleting the ones past expiry."""
        now = self._now()
        loaded = expired = skipped = 0

        for session_id, data in self.storage.load_all():
            try:
                record = SessionRecord.from_persisted(data)
            except (KeyError, TypeError, ValueError, ConsoleException) as e:
                logger.warning(f"Skipping malformed session record {session_id[:8]}: {e}")
                skipped += 1
                continue

            if record.session.session_id != session_id:
                logger.warning(f"Skipping session file {session_id[:8]} with mismatched id")
                skipped += 1
                continue

            if record.session.is_expired(now):
                self.storage.delete(session_id)
                expired += 1
                continue

            self._sessions[session_id] = record
            loaded += 1

        if loaded or expired or skipped:
            logger.info(
                f"Restored {loaded} session(s) from disk "
                f"(expired={expired}, skipped={skipped})"
            )

    def _persist(self, record: SessionRecord) -> None:
        """Write a record. Caller holds the lock."""
        self.storage.save(record.session.session_id, record.to_persisted())

    # ------------------------------------------------------------------
    # Session operations
    # ------------------------------------------------------------------

    def create_session(self, descriptor: ConnectionDescriptor) -> SessionInfo:
        """
        Validate a descriptor and open a session for it.

        Args:
            descriptor: Connection parameters, credentials included

        Returns:
            Public projection of the new session

        Raises:
            UnsupportedEngineError: If no adapter exists for the engine
            ConnectionTestFailed: If the database did not answer in time
        """
        logger.info(f"Creating session for {descriptor.describe()}")

        adapter = self.factory.create(descriptor)
        self._validate(adapter)

        now = self._now()
        session = SessionInfo(
            session_id=str(uuid.uuid4()),
            name=descriptor.name,
            engine=descriptor.engine,
            database=descriptor.database,
            created_at=now,
            expires_at=now + self.ttl,
        )
        record = SessionRecord(descriptor=descriptor, session=session)

        with self._lock:
            self._sessions[session.session_id] = record
            try:
                self._persist(record)
            except OSError as e:
                # Still usable until restart
                logger.error(f"Failed to persist session {session.session_id[:8]}: {e}")

        logger.info(f"Session {session.session_id[:8]} created for {descriptor.describe()}")
        return session

    def _validate(self, adapter: DatabaseAdapter) -> None:
        """Connect, SELECT 1, disconnect, within the validation cutoff."""
        def _probe() -> None:
            with adapter:
                adapter.execute_query("SELECT 1")

        try:
            run_with_timeout(_probe, self.validation_timeout_seconds, operation="Connection test")
        except QueryTimeoutError as e:
            logger.warning(f"Connection test timed out for {adapter.descriptor.describe()}")
            raise ConnectionTestFailed(
                f"Connection test failed: connection timeout after "
                f"{self.validation_timeout_seconds:g} seconds",
                details=e.details,
            )
        except ConsoleException as e:
            logger.warning(f"Connection test failed for {adapter.descriptor.describe()}: {e.message}")
            raise ConnectionTestFailed(f"Connection test failed: {e.message}", details=e.details)
        except Exception as e:
            logger.warning(f"Connection test failed for {adapter.descriptor.describe()}: {e}")
            raise ConnectionTestFailed(f"Connection test failed: {e}")

    def _lookup(self, session_id: str) -> SessionRecord:
        """
        Resolve a live record, expiring it lazily.

        Raises:
            SessionNotFoundError: Unknown id
            SessionExpiredError: Known id past its expiry (now removed)
        """
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                raise SessionNotFoundError(session_id or "")

            if not record.session.is_expired(self._now()):
                return record

            self._sessions.pop(session_id, None)
            try:
                self.storage.delete(session_id)
            except OSError as e:
                logger.error(f"Failed to delete expired session file {session_id[:8]}: {e}")

        logger.info(f"Session {session_id[:8]} expired")
        _disconnect_quietly(record.connection)
        raise SessionExpiredError(session_id)

    def get_session(self, session_id: str) -> SessionInfo:
        """Public projection of a live session."""
        return self._lookup(session_id).session

    def get_connection(self, session_id: str) -> DatabaseAdapter:
        """
        A brand-new, not yet connected adapter for the session.

        The caller owns it: connect, operate, disconnect (or use it as a
        context manager). Two calls never return the same instance.
        """
        record = self._lookup(session_id)
        adapter = self.factory.create(record.descriptor)
        record.connection = adapter
        return adapter

    def destroy_session(self, session_id: str) -> bool:
        """
        Revoke a session.

        Returns:
            True if the session existed, False otherwise
        """
        with self._lock:
            record = self._sessions.pop(session_id, None)
            self.storage.delete(session_id)

        if record is None:
            return False

        _disconnect_quietly(record.connection)
        logger.info(f"Session {session_id[:8]} destroyed")
        return True

    def list_active_sessions(self) -> List[SessionInfo]:
        """Projections of every unexpired session. Deletes nothing."""
        now = self._now()
        with self._lock:
            return [
                record.session
                for record in self._sessions.values()
                if not record.session.is_expired(now)
            ]

    @property
    def active_count(self) -> int:
        return len(self.list_active_sessions())

    # ------------------------------------------------------------------
    # Table metadata cache
    # ------------------------------------------------------------------

    def get_cached_table_metadata(self, session_id: str) -> Optional[Dict[str, TableMetadata]]:
        """Cached metadata map, or None if never refreshed. No database access."""
        record = self._lookup(session_id)
        if record.table_metadata is None:
            return None
        return dict(record.table_metadata)

    def refresh_table_metadata(self, session_id: str) -> Dict[str, TableMetadata]:
        """
        Re-read row counts and sizes for every table and cache them.

        One failing table gets the "Unknown" sentinel instead of
        aborting the batch.
        """
        record = self._lookup(session_id)
        adapter = self.factory.create(record.descriptor)

        metadata: Dict[str, TableMetadata] = {}
        with adapter:
            for table_name in adapter.get_tables():
                try:
                    metadata[table_name] = adapter.get_table_metadata(table_name)
                except Exception as e:
                    logger.warning(f"Metadata failed for table {table_name}: {e}")
                    metadata[table_name] = TableMetadata.unknown(table_name)

        with self._lock:
            # Skip if the session was destroyed or expired meanwhile
            if self._sessions.get(session_id) is record:
                record.table_metadata = metadata
                try:
                    self._persist(record)
                except OSError as e:
                    # Cache stays current in memory until restart
                    logger.error(f"Failed to persist metadata for session {session_id[:8]}: {e}")

        logger.info(f"Refreshed metadata for {len(metadata)} table(s) in session {session_id[:8]}")
        return dict(metadata)

    # ------------------------------------------------------------------
    # Expiry sweep
    # ------------------------------------------------------------------

    def sweep_expired(self) -> int:
        """
        Destroy everything past expiry, in memory and on disk.

        Orphaned files (no in-memory record) are decrypted to read their
        expiry; files that cannot be read at all are judged by their
        modification time against the TTL.

        Returns:
            Number of sessions removed
        """
        now = self._now()

        with self._lock:
            expired_ids = [
                session_id
                for session_id, record in self._sessions.items()
                if record.session.is_expired(now)
            ]
            expired_records = [self._sessions.pop(session_id) for session_id in expired_ids]
            known_ids = set(self._sessions)

        removed = 0
        for record in expired_records:
            self.storage.delete(record.session.session_id)
            _disconnect_quietly(record.connection)
            removed += 1

        for session_id in self.storage.list_ids():
            if session_id in known_ids or session_id in expired_ids:
                continue
            if self._orphan_is_expired(session_id, now):
                with self._lock:
                    # A concurrent create may have claimed the id
                    if session_id not in self._sessions:
                        if self.storage.delete(session_id):
                            removed += 1

        if removed:
            logger.info(f"Session sweep removed {removed} expired session(s)")
        return removed

    def _orphan_is_expired(self, session_id: str, now: datetime) -> bool:
        try:
            data = self.storage.load(session_id)
            expires_at = datetime.fromisoformat(data["session"]["expires_at"])
            return now > expires_at
        except FileNotFoundError:
            return False
        except (OSError, KeyError, TypeError, ValueError) as e:
            modified = self.storage.modified_at(session_id)
            if modified is None:
                return False
            age = now - datetime.fromtimestamp(modified, tz=timezone.utc)
            logger.warning(f"Unreadable session file {session_id[:8]} ({e}), age={age}")
            return age > self.ttl


class SessionSweeper:
    """
    Background thread calling SessionStore.sweep_expired on an interval.

    Explicit start/stop so tests and the application lifespan control it.
    """

    def __init__(self, store: SessionStore, interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS):
        self.store = store
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            # A stop that timed out mid-sweep; keep that thread instead of adding one
            self._stop_event.clear()
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="session-sweeper", daemon=True)
        self._thread.start()
        logger.info(f"Session sweeper started: interval={self.interval_seconds:g}s")

    def stop(self, timeout: float = 5.0) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning(f"Session sweeper still busy after {timeout:g}s; will exit after current sweep")
            return
        self._thread = None
        logger.info("Session sweeper stopped")

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.store.sweep_expired()
            except Exception as e:
                logger.error(f"Session sweep failed: {e}")


def _disconnect_quietly(adapter: Optional[DatabaseAdapter]) -> None:
    """Best-effort disconnect of a tracked adapter."""
    if adapter is None:
        return
    try:
        adapter.disconnect()
    except Exception as e:
        logger.warning(f"Error disconnecting session adapter: {e}")
