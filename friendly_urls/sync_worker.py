"""Background synchronization between the catalog and the mapping store."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Set

from .catalog import CatalogChangeNotification, CatalogItem, CatalogSource, ChangeType
from .database.base import MappingStoreBase
from .database.models import FriendlyUrlMapping
from .url_generator import UrlGenerator
from .errors import ConflictError, FriendlyUrlError, ScanInProgressError


PROGRESS_INTERVAL = 100


class WorkerState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"


class GenerationStatus(str, Enum):
    CREATED = "created"
    EXISTS = "exists"
    CONFLICT = "conflict"
    UNSUPPORTED = "unsupported"
    NOT_FOUND = "not_found"


@dataclass
class GenerationResult:
    """Outcome of generating a mapping for one item."""
    
    status: GenerationStatus
    item_id: str
    friendly_url: Optional[str] = None
    mapping: Optional[FriendlyUrlMapping] = None
    
    @property
    def created(self) -> bool:
        return self.status == GenerationStatus.CREATED


@dataclass
class ScanResult:
    """Counts of a full catalog scan."""
    
    processed_count: int = 0
    generated_count: int = 0
    failed_count: int = 0
    cancelled: bool = False
    
    def to_dict(self) -> dict:
        return {
            "processed_count": self.processed_count,
            "generated_count": self.generated_count,
            "failed_count": self.failed_count,
            "cancelled": self.cancelled,
        }


class CatalogSyncWorker:
    """Keeps the mapping store populated from the catalog.
    
    Change notifications are consumed from a queue by a listener task, each
    handled in its own task. Full scans walk every root folder and its
    descendants. Generation is idempotent per item, so a scan that stops half
    way can simply be run again.
    """
    
    def __init__(
        self,
        catalog: CatalogSource,
        store: MappingStoreBase,
        generator: UrlGenerator,
        auto_generate: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize sync worker.
        
        Args:
            catalog: Catalog source
            store: Mapping store
            generator: URL generator
            auto_generate: React to change notifications
            logger: Optional logger
        """
        self.catalog = catalog
        self.store = store
        self.generator = generator
        self.auto_generate = auto_generate
        self.logger = logger or logging.getLogger(__name__)
        
        self.state = WorkerState.IDLE
        self.last_scan: Optional[ScanResult] = None
        
        self._queue: "asyncio.Queue[Optional[CatalogChangeNotification]]" = asyncio.Queue()
        self._listener: Optional[asyncio.Task] = None
        self._scan_task: Optional[asyncio.Task] = None
        self._event_tasks: Set[asyncio.Task] = set()
        self._scan_lock = asyncio.Lock()
        self._stopping = asyncio.Event()
    
    @property
    def is_running(self) -> bool:
        return self._listener is not None and not self._listener.done()
    
    @property
    def is_scanning(self) -> bool:
        return self.state == WorkerState.SCANNING
    
    # -- lifecycle --
    
    async def start(self, initial_scan: bool = False) -> None:
        """Start the notification listener.
        
        Args:
            initial_scan: Also launch a full scan in the background
        """
        if self.is_running:
            return
        self._stopping.clear()
        self._listener = asyncio.create_task(self._listen(), name="friendly-urls-listener")
        self.logger.info("Catalog sync worker started")
        
        if initial_scan:
            self.start_full_scan()
    
    async def stop(self) -> None:
        """Stop the listener and let in-flight work finish.
        
        A running scan ends after the item it is processing.
        """
        self._stopping.set()
        
        if self._listener is not None:
            self._queue.put_nowait(None)
            await self._listener
            self._listener = None
        
        if self._scan_task is not None:
            await asyncio.gather(self._scan_task, return_exceptions=True)
            self._scan_task = None
        
        if self._event_tasks:
            await asyncio.gather(*list(self._event_tasks), return_exceptions=True)
        
        self.logger.info("Catalog sync worker stopped")
    
    # -- notifications --
    
    def notify(self, notification: CatalogChangeNotification) -> None:
        """Queue a catalog change notification."""
        self._queue.put_nowait(notification)
    
    async def _listen(self) -> None:
        while True:
            notification = await self._queue.get()
            if notification is None:
                break
            task = asyncio.create_task(self.handle_notification(notification))
            self._event_tasks.add(task)
            task.add_done_callback(self._event_tasks.discard)
    
    async def handle_notification(self, notification: CatalogChangeNotification) -> Optional[GenerationResult]:
        """Handle one catalog change.
        
        Errors are logged and swallowed so one bad item never stops the
        listener.
        
        Args:
            notification: The change
            
        Returns:
            Generation result, or None if nothing was attempted
        """
        if not self.auto_generate:
            return None
        
        item = notification.item
        try:
            if notification.change == ChangeType.UPDATED:
                existing = await self.store.find_by_item_id(item.id)
                if existing is not None:
                    return None
            return await self.ensure_mapping(item)
        except FriendlyUrlError as e:
            self.logger.error(f"Error generating URL for {notification.change.value} item {item.id}: {e}")
        except Exception:
            self.logger.exception(f"Unexpected error generating URL for {notification.change.value} item {item.id}")
        return None
    
    # -- generation --
    
    async def ensure_mapping(self, item: CatalogItem) -> GenerationResult:
        """Generate and store a mapping for an item unless it already has one.
        
        Args:
            item: Catalog item
            
        Returns:
            Generation result
            
        Raises:
            StorageError: If the store cannot be read or written
        """
        existing = await self.store.find_by_item_id(item.id)
        if existing is not None:
            return GenerationResult(GenerationStatus.EXISTS, item.id, existing.friendly_url, existing)
        
        mapping = self.generator.build_mapping(item)
        if mapping is None:
            return GenerationResult(GenerationStatus.UNSUPPORTED, item.id)
        
        try:
            await self.store.insert(mapping)
        except ConflictError as e:
            # Lost a race for the same item
            existing = await self.store.find_by_item_id(item.id)
            if existing is not None:
                return GenerationResult(GenerationStatus.EXISTS, item.id, existing.friendly_url, existing)
            self.logger.info(f"Friendly URL {mapping.friendly_url} for item {item.id} not stored: {e}")
            return GenerationResult(GenerationStatus.CONFLICT, item.id, mapping.friendly_url)
        
        self.logger.debug(f"Generated friendly URL for {item.kind.value} '{item.name}': {mapping.friendly_url}")
        return GenerationResult(GenerationStatus.CREATED, item.id, mapping.friendly_url, mapping)
    
    # -- full scan --
    
    def start_full_scan(self) -> asyncio.Task:
        """Run a full scan in a background task.
        
        Raises:
            ScanInProgressError: If a scan is already running
        """
        if self.is_scanning or (self._scan_task is not None and not self._scan_task.done()):
            raise ScanInProgressError("A catalog scan is already running")
        self._scan_task = asyncio.create_task(self._run_scan_logged(), name="friendly-urls-scan")
        return self._scan_task
    
    async def _run_scan_logged(self) -> Optional[ScanResult]:
        try:
            return await self.run_full_scan()
        except ScanInProgressError as e:
            self.logger.warning(str(e))
        except Exception:
            self.logger.exception("Error during bulk URL generation")
        return None
    
    async def run_full_scan(self) -> ScanResult:
        """Generate mappings for every item in the catalog.
        
        Returns:
            Processed / generated counts
            
        Raises:
            ScanInProgressError: If another scan is running
        """
        if self._scan_lock.locked():
            raise ScanInProgressError("A catalog scan is already running")
        
        async with self._scan_lock:
            self.state = WorkerState.SCANNING
            result = ScanResult()
            self.logger.info("Starting bulk URL generation for existing content...")
            try:
                for folder in await self.catalog.get_root_folders():
                    if self._stopping.is_set():
                        break
                    await self._process_item(folder, result)
                    try:
                        children = await self.catalog.get_recursive_children(folder)
                    except Exception as e:
                        self.logger.error(f"Error listing children of {folder.id} during bulk generation: {e}")
                        continue
                    for child in children:
                        if self._stopping.is_set():
                            break
                        await self._process_item(child, result)
                
                result.cancelled = self._stopping.is_set()
                self.logger.info(
                    f"Bulk URL generation {'stopped' if result.cancelled else 'completed'}. "
                    f"Processed: {result.processed_count}, Generated: {result.generated_count}"
                )
            finally:
                self.state = WorkerState.IDLE
                self.last_scan = result
        
        return result
    
    async def _process_item(self, item: CatalogItem, result: ScanResult) -> None:
        try:
            generation = await self.ensure_mapping(item)
            if generation.created:
                result.generated_count += 1
        except Exception as e:
            result.failed_count += 1
            self.logger.error(f"Error processing item {item.id} during bulk generation: {e}")
        result.processed_count += 1
        
        if result.processed_count % PROGRESS_INTERVAL == 0:
            self.logger.info(
                f"Bulk generation progress: {result.processed_count} processed, "
                f"{result.generated_count} generated"
            )
