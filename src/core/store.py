"""
JSON file persistence for the tournament document.

The whole document is read and rewritten on every operation. Callers that
mutate it hold ``store.locked()`` across the load-mutate-save sequence.
"""
import json
import logging
import os
import tempfile
from contextlib import contextmanager

from filelock import FileLock, Timeout

from core.errors import StorageUnavailable
from core.models import TournamentDocument

logger = logging.getLogger(__name__)


class TournamentStore:
    def __init__(self, path: str, lock_timeout: float = 10):
        self.path = path
        self.lock = FileLock(path + '.lock', timeout=lock_timeout)

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> TournamentDocument:
        """Read the document. Raises StorageUnavailable if unreadable or malformed."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageUnavailable(f'Failed to read {self.path}: {e}') from e
        try:
            return TournamentDocument.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageUnavailable(f'Malformed tournament data in {self.path}: {e}') from e

    def save(self, doc: TournamentDocument):
        """Overwrite the document with ``doc``.

        The new content goes to a temporary file in the same directory, which
        then replaces the document, so readers see either the old or the new
        version and never a partial one.
        """
        directory = os.path.dirname(self.path) or '.'
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            with tempfile.NamedTemporaryFile('w', encoding='utf-8', dir=directory,
                                             prefix='.tournament-', suffix='.tmp', delete=False) as f:
                tmp_path = f.name
                json.dump(doc.to_dict(), f, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageUnavailable(f'Failed to write {self.path}: {e}') from e

    def initialize_if_absent(self) -> bool:
        """Write the default document unless one already exists. Returns True if created."""
        with self.locked():
            if self.exists():
                return False
            self.save(TournamentDocument.default())
        logger.info('Created default tournament data at %s', self.path)
        return True

    @contextmanager
    def locked(self):
        """Hold the document lock, converting a lock timeout to StorageUnavailable."""
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        try:
            self.lock.acquire()
        except Timeout as e:
            raise StorageUnavailable(f'Timed out waiting for {self.lock.lock_file}') from e
        try:
            yield self
        finally:
            self.lock.release()
