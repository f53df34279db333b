"""JSON file implementation of the mapping store."""

import asyncio
import fcntl
import json
import logging
import os
import tempfile
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional, List, Dict, Any, Tuple

from .base import MappingStoreBase
from .models import FriendlyUrlMapping, normalize_friendly_url, utcnow
from ..errors import ConflictError, NotFoundError, StorageError


class JsonFileMappingStore(MappingStoreBase):
    """Mapping store backed by a single JSON document on disk.
    
    Every read-modify-write cycle runs under an asyncio lock and an exclusive
    ``flock`` on a sidecar ``<file>.lock``, so writers in other processes (the
    CLI, extra server workers) are serialized too. The document is always
    reloaded inside that critical section. The file is replaced atomically
    (write to a temporary file, then ``os.replace``), so a reader never sees a
    half written document. Reads are served from an in-memory copy that is
    reloaded when the file's modification time changes.
    """
    
    backend_name = "json"
    FORMAT_VERSION = 1
    
    def __init__(
        self,
        db_config: str,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize JSON file store.
        
        Args:
            db_config: Path of the JSON document (created on first write)
            logger: Optional logger instance
        """
        super().__init__(db_config)
        
        self.logger = logger or logging.getLogger(__name__)
        self.path = os.path.abspath(db_config)
        self.lock_path = f"{self.path}.lock"
        
        self._lock = asyncio.Lock()
        self._records: Dict[str, FriendlyUrlMapping] = {}
        self._loaded_stamp: Optional[Tuple[int, int]] = None
    
    # -- file access (runs in a worker thread) --
    
    def _file_stamp(self) -> Optional[Tuple[int, int]]:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return None
        return (st.st_mtime_ns, st.st_size)
    
    def _read_file(self) -> Tuple[Dict[str, FriendlyUrlMapping], Optional[Tuple[int, int]]]:
        stamp = self._file_stamp()
        if stamp is None:
            return {}, None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
            entries = document.get("mappings", []) if isinstance(document, dict) else document
            records = {}
            for entry in entries:
                mapping = FriendlyUrlMapping.from_dict(entry)
                records[mapping.id] = mapping
            return records, stamp
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Cannot read mapping file {self.path}: {e}") from e
    
    def _write_file(self, records: Dict[str, FriendlyUrlMapping]) -> Optional[Tuple[int, int]]:
        document = {
            "version": self.FORMAT_VERSION,
            "mappings": [m.to_dict() for m in records.values()],
        }
        directory = os.path.dirname(self.path) or "."
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".friendly-urls-", suffix=".tmp", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write mapping file {self.path}: {e}") from e
        return self._file_stamp()
    
    def _acquire_file_lock(self) -> int:
        try:
            os.makedirs(os.path.dirname(self.lock_path) or ".", exist_ok=True)
            fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            raise StorageError(f"Cannot open lock file {self.lock_path}: {e}") from e
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError as e:
            os.close(fd)
            raise StorageError(f"Cannot lock {self.lock_path}: {e}") from e
        return fd
    
    @staticmethod
    def _release_file_lock(fd: int) -> None:
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
    
    @asynccontextmanager
    async def _write_lock(self):
        """Exclusive access to the document, within and across processes."""
        async with self._lock:
            acquiring = asyncio.ensure_future(asyncio.to_thread(self._acquire_file_lock))
            try:
                fd = await asyncio.shield(acquiring)
            except asyncio.CancelledError:
                # The thread keeps waiting for the lock; release it once it lands
                acquiring.add_done_callback(self._release_abandoned_lock)
                raise
            try:
                yield
            finally:
                self._release_file_lock(fd)
    
    def _release_abandoned_lock(self, acquiring: asyncio.Future) -> None:
        if not acquiring.cancelled() and acquiring.exception() is None:
            self._release_file_lock(acquiring.result())
    
    async def _load(self, force: bool = False) -> Dict[str, FriendlyUrlMapping]:
        """Return current records, reloading from disk if the file changed.
        
        Args:
            force: Reload even if the file stamp is unchanged (writers must, as
                two writes within the clock resolution can share a stamp)
        """
        stamp = await asyncio.to_thread(self._file_stamp)
        if not force:
            if stamp is not None and stamp == self._loaded_stamp:
                return self._records
            if stamp is None and self._loaded_stamp is None:
                return self._records
        records, stamp = await asyncio.to_thread(self._read_file)
        self._records = records
        self._loaded_stamp = stamp
        return records
    
    async def _save(self, records: Dict[str, FriendlyUrlMapping]) -> None:
        stamp = await asyncio.to_thread(self._write_file, records)
        self._records = records
        self._loaded_stamp = stamp
    
    # -- lookups --
    
    @staticmethod
    def _find_active(records, predicate) -> Optional[FriendlyUrlMapping]:
        for mapping in records.values():
            if mapping.is_active and predicate(mapping):
                return mapping
        return None
    
    async def find_by_friendly_url(self, friendly_url: str) -> Optional[FriendlyUrlMapping]:
        key = normalize_friendly_url(friendly_url)
        records = await self._load()
        found = self._find_active(records, lambda m: m.lookup_key == key)
        return found.copy() if found else None
    
    async def find_by_item_id(self, item_id: str) -> Optional[FriendlyUrlMapping]:
        item_id = str(item_id)
        records = await self._load()
        found = self._find_active(records, lambda m: m.item_id == item_id)
        return found.copy() if found else None
    
    async def get(self, mapping_id: str) -> Optional[FriendlyUrlMapping]:
        records = await self._load()
        found = records.get(str(mapping_id))
        return found.copy() if found else None
    
    async def list_all(self) -> List[FriendlyUrlMapping]:
        records = await self._load()
        return sorted((m.copy() for m in records.values()), key=lambda m: m.created_at)
    
    # -- mutations --
    
    def _check_unique(self, records, mapping: FriendlyUrlMapping) -> None:
        if not mapping.is_active:
            return
        key = mapping.lookup_key
        for other in records.values():
            if other.id == mapping.id or not other.is_active:
                continue
            if other.item_id == mapping.item_id:
                raise ConflictError(
                    f"Item '{mapping.item_id}' already has a friendly URL",
                    field="item_id",
                    value=mapping.item_id,
                )
            if other.lookup_key == key:
                raise ConflictError(
                    f"Friendly URL '{mapping.friendly_url}' already exists",
                    field="friendly_url",
                    value=mapping.friendly_url,
                )
    
    async def insert(self, mapping: FriendlyUrlMapping) -> None:
        async with self._write_lock():
            records = dict(await self._load(force=True))
            if mapping.id in records:
                raise ConflictError(f"Mapping id '{mapping.id}' already exists", field="id", value=mapping.id)
            self._check_unique(records, mapping)
            records[mapping.id] = mapping.copy()
            await self._save(records)
        
        self.logger.info(f"Created friendly URL: {mapping.friendly_url} -> {mapping.original_url}")
    
    async def update(self, mapping: FriendlyUrlMapping) -> FriendlyUrlMapping:
        async with self._write_lock():
            records = dict(await self._load(force=True))
            current = records.get(mapping.id)
            if current is None:
                raise NotFoundError(f"Mapping not found: {mapping.id}")
            self._check_unique(records, mapping)
            stored = mapping.copy(updated_at=utcnow())
            records[mapping.id] = stored
            await self._save(records)
        
        mapping.updated_at = stored.updated_at
        self.logger.debug(f"Updated mapping {mapping.id}")
        return stored.copy()
    
    async def delete(self, mapping_id: str) -> bool:
        async with self._write_lock():
            records = dict(await self._load(force=True))
            if records.pop(str(mapping_id), None) is None:
                return False
            await self._save(records)
        
        self.logger.info(f"Deleted mapping {mapping_id}")
        return True
    
    async def deactivate(self, mapping_id: str) -> bool:
        async with self._write_lock():
            records = dict(await self._load(force=True))
            current = records.get(str(mapping_id))
            if current is None or not current.is_active:
                return False
            records[current.id] = current.copy(is_active=False, updated_at=utcnow())
            await self._save(records)
        
        self.logger.info(f"Deactivated mapping {mapping_id}")
        return True
    
    async def record_access(self, mapping_id: str, accessed_at: datetime) -> Optional[FriendlyUrlMapping]:
        async with self._write_lock():
            records = dict(await self._load(force=True))
            current = records.get(str(mapping_id))
            if current is None or not current.is_active:
                return None
            stored = current.copy(
                access_count=current.access_count + 1,
                last_accessed=accessed_at,
                updated_at=accessed_at,
            )
            records[current.id] = stored
            await self._save(records)
        
        return stored.copy()
    
    # -- maintenance --
    
    async def get_statistics(self) -> Dict[str, Any]:
        try:
            records = await self._load()
        except StorageError as e:
            self.logger.error(f"Error getting statistics: {e}")
            return {
                "total_mappings": 0,
                "active_mappings": 0,
                "total_accesses": 0,
                "database": self.backend_name,
                "status": "error",
                "error": str(e),
            }
        
        return {
            "total_mappings": len(records),
            "active_mappings": sum(1 for m in records.values() if m.is_active),
            "total_accesses": sum(m.access_count for m in records.values()),
            "database": self.backend_name,
            "status": "healthy",
        }
    
    async def health_check(self) -> bool:
        try:
            await self._load()
        except StorageError as e:
            self.logger.error(f"Health check failed: {e}")
            return False
        directory = os.path.dirname(self.path) or "."
        return os.access(directory, os.W_OK) or not os.path.exists(directory)
    
    async def close(self) -> None:
        self._records = {}
        self._loaded_stamp = None
