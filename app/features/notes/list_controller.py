"""Note list controller - loading, debounced search, tag filter and sorting"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from app import config
from app.features.auth.session import NotAuthenticated, SessionContext
from app.features.notes.domain import SortKey, collect_tags, filter_by_tag, sort_notes
from app.infra.supabase.errors import StoreError
from app.infra.supabase.repositories.notes import NoteRepository
from app.models.note import Note

logger = logging.getLogger(__name__)


@dataclass
class NoteListState:
    """View state owned by one NoteListController"""
    notes: List[Note] = field(default_factory=list)
    search_term: str = ""
    selected_tag: str = ""
    sort_key: SortKey = SortKey.UPDATED
    is_loading: bool = False
    error: Optional[str] = None


class NoteListController:
    """
    Owns the current user's note collection and the derived list view.

    Search input is debounced: each new term cancels the pending timer and
    restarts it. Requests already sent are never cancelled; each carries a
    sequence number and only the most recently issued one may update state.
    """

    def __init__(
        self,
        session: SessionContext,
        notes: NoteRepository,
        quiet_period: Optional[float] = None
    ):
        self._session = session
        self._notes = notes
        self._quiet_period = config.SEARCH_DEBOUNCE_SECONDS if quiet_period is None else quiet_period
        self.state = NoteListState()

        self._request_seq = 0
        self._debounce_task: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    async def activate(self) -> None:
        """Initial load once a session is available"""
        if not self._session.is_active:
            raise NotAuthenticated("Notes can only be listed inside a session")
        await self._fetch(self.state.search_term)

    async def refresh(self) -> None:
        """Re-run the current search immediately, skipping the debounce"""
        self._cancel_debounce()
        await self._fetch(self.state.search_term)

    def set_search_term(self, term: str) -> None:
        """Record a keystroke and (re)start the quiet period timer"""
        self.state.search_term = term
        self._cancel_debounce()
        self._debounce_task = asyncio.get_running_loop().create_task(self._debounced_fetch(term))

    def set_selected_tag(self, tag: Optional[str]) -> None:
        self.state.selected_tag = tag or ""

    def set_sort_key(self, sort_key: SortKey | str) -> None:
        self.state.sort_key = SortKey(sort_key)

    async def settle(self) -> None:
        """Wait until no debounce timer or request is outstanding"""
        while True:
            pending = [t for t in self._in_flight if not t.done()]
            if self._debounce_task is not None and not self._debounce_task.done():
                pending.append(self._debounce_task)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # Derived view
    # ------------------------------------------------------------------

    @property
    def visible_notes(self) -> List[Note]:
        filtered = filter_by_tag(self.state.notes, self.state.selected_tag)
        return sort_notes(filtered, self.state.sort_key)

    @property
    def all_tags(self) -> List[str]:
        return collect_tags(self.state.notes)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None

    async def _debounced_fetch(self, term: str) -> None:
        await asyncio.sleep(self._quiet_period)
        self._debounce_task = None
        if not self._session.is_active:
            logger.info("Session ended before the debounced search ran; dropping it")
            return
        # past this point the request is in flight and must not be cancelled
        task = asyncio.get_running_loop().create_task(self._fetch(term, self._session.user_id))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _fetch(self, term: str, owner_id: Optional[str] = None) -> None:
        self._request_seq += 1
        seq = self._request_seq
        owner_id = owner_id or self._session.user_id
        self.state.is_loading = True

        try:
            if term.strip():
                notes = await self._notes.search_by_owner(owner_id, term)
            else:
                notes = await self._notes.list_by_owner(owner_id)
        except StoreError as e:
            if seq != self._request_seq:
                logger.info(f"Ignoring failure of superseded request {seq}")
                return
            logger.error(f"Loading notes failed: {e}")
            # keep the last successfully loaded notes on screen
            self.state.error = e.user_message
            self.state.is_loading = False
            return

        if seq != self._request_seq:
            logger.info(f"Discarding stale response {seq} (latest is {self._request_seq})")
            return

        self.state.notes = notes
        self.state.error = None
        self.state.is_loading = False
