"""Entity resolver: single owner of the in-memory card catalog.

The resolver runs as one asyncio task that drains a mailbox of
``LookupRequest`` and ``UpsertRequest`` messages, one at a time. The catalog
list is private to that task:

- Lookups scan it read-only, fanned out over a thread pool, and answer the
  caller's future with a compact JSON payload.
- Upserts scan for an exact match (case and spacing folded; prefix match on
  lite text for truncated fields), then mutate the list on the resolver task
  itself once the scan has finished, so a write never overlaps a read and no
  lock guards the catalog.

Persistence writes run in the background. Writes for the same
``(name, series)`` are chained so the last issued write is the last applied;
a failed write is logged and counted without stopping the resolver.

Example:
    >>> resolver = EntityResolver(InMemoryCatalogStore(entries))
    >>> task = asyncio.create_task(resolver.run())
    >>> await resolver.wait_ready()
    >>> await resolver.lookup([CardRecord("naruto", "naruto", "12")])
    '[{"name":"naruto","series":"naruto","wl":5,"gen":"12"}]'
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from src.common.bridge import HostBridge
from src.common.types import CardRecord
from src.utils.io import dump_compact_json

from .config_loader import ResolverConfig
from .matcher import check_equal, check_match, identity_key, normalize, normalize_lite
from .store import CatalogStore, CatalogStoreError
from .types import CatalogEntry, LookupRequest, ResolverState, UpsertRequest

logger = logging.getLogger(__name__)

_SHUTDOWN = object()

EntryKey = Tuple[str, str]
# (identity name, identity series, lite name, lite series)
UpdateKey = Tuple[str, str, str, str]
# (truncated, text): lite text for a prefix match, identity key otherwise
FieldQuery = Tuple[bool, str]


class ResolverClosedError(RuntimeError):
    """Raised when work is submitted to a resolver that has been closed."""


class EntityResolver:
    """Actor owning the card catalog.

    Args:
        store: Persistence collaborator the catalog is loaded from and mirrored to.
        config: Resolver tuning; defaults to ``ResolverConfig()``.
        bridge: Optional host bridge notified once the catalog is loaded.

    Attributes:
        state: Current lifecycle state.
        failed_writes: Number of persistence writes that raised.
    """

    COMPONENT = "resolver"

    def __init__(
        self,
        store: CatalogStore,
        config: Optional[ResolverConfig] = None,
        bridge: Optional[HostBridge] = None,
    ):
        self.store = store
        self.config = config or ResolverConfig()
        self.bridge = bridge
        self.state = ResolverState.LOADING
        self.failed_writes = 0

        self._catalog: List[CatalogEntry] = []
        # Derived comparison keys, index-aligned with _catalog
        self._match_keys: List[EntryKey] = []
        self._update_keys: List[UpdateKey] = []

        self._mailbox: "asyncio.Queue[object]" = asyncio.Queue()
        self._ready = asyncio.Event()
        self._closing = False
        self._scan_executor = ThreadPoolExecutor(
            max_workers=self.config.scan_workers, thread_name_prefix="catalog-scan"
        )
        self._pending_writes: Dict[EntryKey, "asyncio.Task[None]"] = {}

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def submit_lookup(
        self, records: Iterable[CardRecord], reply: "asyncio.Future[str]"
    ) -> None:
        """Queue a lookup; the JSON reply is delivered on ``reply``."""
        self._check_open()
        self._mailbox.put_nowait(LookupRequest(records=list(records), reply=reply))

    def submit_update(self, record: CardRecord) -> None:
        """Queue a catalog update for a record with a known rank."""
        self._check_open()
        self._mailbox.put_nowait(UpsertRequest(record=record))

    async def lookup(self, records: Iterable[CardRecord]) -> str:
        """Resolve ``records`` and wait for the JSON reply."""
        reply: "asyncio.Future[str]" = asyncio.get_running_loop().create_future()
        self.submit_lookup(records, reply)
        return await reply

    def close(self) -> None:
        """Stop accepting work; queued messages are still processed."""
        if self._closing:
            return
        self._closing = True
        self._mailbox.put_nowait(_SHUTDOWN)
        logger.info("Entity resolver closing")

    async def wait_ready(self) -> None:
        await self._ready.wait()

    async def flush(self) -> None:
        """Wait until every scheduled persistence write has finished."""
        while self._pending_writes:
            await asyncio.wait(list(self._pending_writes.values()))

    @property
    def catalog_size(self) -> int:
        return len(self._catalog)

    def snapshot(self) -> List[CatalogEntry]:
        """Copies of the current catalog entries, for diagnostics."""
        return [replace(entry) for entry in self._catalog]

    def _check_open(self) -> None:
        if self._closing or self.state == ResolverState.STOPPED:
            raise ResolverClosedError("Entity resolver is closed")

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Load the catalog, signal readiness, then serve the mailbox.

        Raises:
            CatalogStoreError: If the catalog cannot be loaded.
        """
        loop = asyncio.get_running_loop()
        try:
            entries = await loop.run_in_executor(None, self.store.load_all)
        except CatalogStoreError:
            logger.error("Failed to load catalog, resolver not started")
            self._stop()
            raise

        seen = set()
        for entry in entries:
            key = (entry.name, entry.series)
            if key in seen:
                logger.warning(
                    f"Duplicate catalog entry ignored: ({entry.name!r}, {entry.series!r})"
                )
                continue
            seen.add(key)
            self._append(entry)

        self.state = ResolverState.READY
        self._ready.set()
        logger.info(f"Entity resolver ready with {len(self._catalog)} catalog entries")
        if self.bridge is not None:
            self.bridge.signal_ready(self.COMPONENT)

        try:
            while True:
                message = await self._mailbox.get()
                if message is _SHUTDOWN:
                    break
                if isinstance(message, LookupRequest):
                    await self._handle_lookup(message)
                elif isinstance(message, UpsertRequest):
                    await self._handle_upsert(message.record)
                else:
                    logger.error(f"Unknown resolver message: {message!r}")
        finally:
            self._stop()

    def _stop(self) -> None:
        self.state = ResolverState.STOPPED
        self._closing = True
        self._scan_executor.shutdown(wait=False)
        while not self._mailbox.empty():
            message = self._mailbox.get_nowait()
            if isinstance(message, LookupRequest) and not message.reply.done():
                message.reply.set_exception(ResolverClosedError("Entity resolver stopped"))
        if self._pending_writes:
            logger.warning(
                f"{len(self._pending_writes)} persistence write(s) still in flight at shutdown"
            )
        logger.info("Entity resolver stopped")

    def _append(self, entry: CatalogEntry) -> None:
        self._catalog.append(entry)
        self._match_keys.append((normalize(entry.name).text, normalize(entry.series).text))
        self._update_keys.append(
            (
                identity_key(entry.name),
                identity_key(entry.series),
                normalize_lite(entry.name).text,
                normalize_lite(entry.series).text,
            )
        )

    async def _scan(self, keys: List[tuple], predicate: Callable[[tuple], bool]) -> Optional[int]:
        """Index of the first key satisfying ``predicate``, scanned in parallel chunks."""
        total = len(keys)
        if total == 0:
            return None
        chunk = -(-total // self.config.scan_workers)
        loop = asyncio.get_running_loop()
        hits = await asyncio.gather(
            *(
                loop.run_in_executor(
                    self._scan_executor, _first_match, keys, predicate, start, min(start + chunk, total)
                )
                for start in range(0, total, chunk)
            )
        )
        found = [index for index in hits if index is not None]
        return min(found) if found else None

    async def _resolve(self, record: CardRecord) -> CardRecord:
        name = normalize(record.name)
        series = normalize(record.series)
        if not name.text or not series.text:
            # Recognition gap: an empty key would match every entry
            logger.debug(f"Skipping resolution of blank field in ({record.name!r}, {record.series!r})")
            return record

        def predicate(key: EntryKey) -> bool:
            return check_match(key[0], name.text, name.truncated) and check_match(
                key[1], series.text, series.truncated
            )

        index = await self._scan(self._match_keys, predicate)
        if index is None:
            logger.debug(f"No catalog match for ({record.name!r}, {record.series!r})")
            return record
        return record.with_rank(self._catalog[index].rank)

    async def _handle_lookup(self, request: LookupRequest) -> None:
        if request.reply.done():
            logger.debug("Lookup caller went away, skipping")
            return
        try:
            resolved = await asyncio.gather(*(self._resolve(r) for r in request.records))
            payload = dump_compact_json(
                [record.to_reply_dict() for record in resolved[: self.config.reply_limit]]
            )
        except Exception as e:
            logger.error(f"Lookup failed: {e}", exc_info=True)
            if not request.reply.done():
                request.reply.set_exception(e)
            return

        if not request.reply.done():
            request.reply.set_result(payload)

    async def _handle_upsert(self, record: CardRecord) -> None:
        if record.rank is None:
            logger.warning(f"Ignoring catalog update without rank: ({record.name!r}, {record.series!r})")
            return

        name = _field_query(record.name)
        series = _field_query(record.series)
        if (name[0] and not name[1].strip(".")) or (series[0] and not series[1].strip(".")):
            logger.info(
                f"Dropping update for truncated card ({record.name!r}, {record.series!r}) "
                f"with no usable prefix"
            )
            return

        def predicate(key: UpdateKey) -> bool:
            return _field_equal(key[0], key[2], name) and _field_equal(key[1], key[3], series)

        index = await self._scan(self._update_keys, predicate)
        if index is not None:
            entry = self._catalog[index]
            entry.rank = record.rank
            logger.debug(f"Updated rank of ({entry.name!r}, {entry.series!r}) to {entry.rank}")
            self._schedule_write(entry)
        elif name[0] or series[0]:
            logger.info(
                f"Dropping update for truncated card ({record.name!r}, {record.series!r}) "
                f"with no exact catalog match"
            )
        else:
            entry = CatalogEntry.from_record(record)
            self._append(entry)
            logger.debug(f"Added catalog entry ({entry.name!r}, {entry.series!r}) rank {entry.rank}")
            self._schedule_write(entry)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _schedule_write(self, entry: CatalogEntry) -> None:
        key = (entry.name, entry.series)
        previous = self._pending_writes.get(key)
        task = asyncio.create_task(self._persist(replace(entry), previous))
        self._pending_writes[key] = task

        def _forget(done: "asyncio.Task[None]") -> None:
            if self._pending_writes.get(key) is done:
                del self._pending_writes[key]

        task.add_done_callback(_forget)

    async def _persist(
        self, entry: CatalogEntry, previous: Optional["asyncio.Task[None]"]
    ) -> None:
        if previous is not None:
            await asyncio.wait([previous])
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.store.upsert, entry)
        except Exception as e:
            self.failed_writes += 1
            logger.error(
                f"Failed to persist catalog entry ({entry.name!r}, {entry.series!r}): {e}",
                exc_info=True,
            )


def _field_query(text: str) -> FieldQuery:
    """Truncated fields prefix-match on lite text; others match the identity key."""
    lite = normalize_lite(text)
    if lite.truncated:
        return True, lite.text
    return False, identity_key(text)


def _field_equal(identity: str, lite: str, query: FieldQuery) -> bool:
    truncated, text = query
    if truncated:
        return check_equal(lite, text, True)
    return identity == text


def _first_match(
    keys: List[tuple], predicate: Callable[[tuple], bool], start: int, stop: int
) -> Optional[int]:
    for index in range(start, stop):
        if predicate(keys[index]):
            return index
    return None
