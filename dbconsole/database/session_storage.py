"""
Encrypted session files.

Layout: one file per session under the sessions directory, named
``<session id>.session``, holding a Fernet token of the JSON record

    {"descriptor": {...}, "session": {...}, "table_metadata": {...} | null}

Writes go to a temp file in the same directory and are renamed into
place, so a crash mid-write never leaves a half written session.
"""
import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from dbconsole.core.crypto import SessionCipher
from dbconsole.core.logging_config import get_logger
from dbconsole.core.validators import validate_session_id

logger = get_logger(__name__)

SESSION_FILE_SUFFIX = ".session"


class SessionFileStore:
    """
    Durable storage for session records.

    Example:
        >>> storage = SessionFileStore(Path(".sessions"), cipher)
        >>> storage.save(session_id, record)
        >>> for session_id, record in storage.load_all():
        ...     print(session_id)
    """

    def __init__(self, directory: Path, cipher: SessionCipher):
        self.directory = Path(directory)
        self.cipher = cipher
        self.directory.mkdir(parents=True, exist_ok=True)
        try:
            os.chmod(self.directory, 0o700)
        except OSError as e:
            logger.warning(f"Could not restrict permissions on {self.directory}: {e}")

    def path_for(self, session_id: str) -> Path:
        is_valid, error = validate_session_id(session_id)
        if not is_valid:
            raise ValueError(error)
        return self.directory / f"{session_id}{SESSION_FILE_SUFFIX}"

    def save(self, session_id: str, record: Dict[str, Any]) -> None:
        """Encrypt and atomically write one record."""
        target = self.path_for(session_id)
        blob = self.cipher.encrypt(json.dumps(record, default=_json_default).encode("utf-8"))

        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=SESSION_FILE_SUFFIX)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(blob)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, target)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

        logger.debug(f"Persisted session {session_id[:8]}")

    def load(self, session_id: str) -> Dict[str, Any]:
        """
        Read and decrypt one record.

        Raises:
            FileNotFoundError: If no file exists for the id
            ValueError: If the file is corrupt or was written with another key
        """
        blob = self.path_for(session_id).read_bytes()
        plaintext = self.cipher.decrypt(blob)
        try:
            record = json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValueError(f"Session record is not valid JSON: {e}") from e
        if not isinstance(record, dict):
            raise ValueError("Session record is not an object")
        return record

    def delete(self, session_id: str) -> bool:
        """Remove a record. Returns False if it was already gone."""
        try:
            self.path_for(session_id).unlink()
            logger.debug(f"Deleted session file {session_id[:8]}")
            return True
        except FileNotFoundError:
            return False
        except ValueError:
            return False

    def list_ids(self) -> List[str]:
        """Ids of every well-named session file on disk."""
        ids = []
        for path in self.directory.glob(f"*{SESSION_FILE_SUFFIX}"):
            session_id = path.name[: -len(SESSION_FILE_SUFFIX)]
            if validate_session_id(session_id)[0]:
                ids.append(session_id)
        return sorted(ids)

    def modified_at(self, session_id: str) -> Optional[float]:
        try:
            return self.path_for(session_id).stat().st_mtime
        except (FileNotFoundError, ValueError):
            return None

    def load_all(self) -> Iterator[Tuple[str, Dict[str, Any]]]:
        """
        Yield (session_id, record) for every readable file.

        Unreadable files are logged and skipped, never raised.
        """
        for session_id in self.list_ids():
            try:
                yield session_id, self.load(session_id)
            except FileNotFoundError:
                continue
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping unreadable session file {session_id[:8]}: {e}")


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
