"""
BaseListViewModel - paginated "load more" list.

Subclasses implement ``load_page_async(reset_paging)``: fetch one page,
append it to ``items`` and set ``can_load_more`` to whether a full page
came back. Filter setters only record state; callers reload explicitly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from ...utils.logging_setup import get_logger
from ...utils.perf_logger import log_timing, log_timing_async
from .base import BaseViewModel
from .rendering import ListCell, ListColumn, ListRecord, validate_records

logger = get_logger(__name__)

TItem = TypeVar("TItem")


class BaseListViewModel(BaseViewModel, ABC, Generic[TItem]):
    """
    Generic list with search and date-range filters.

    State:
        items: loaded DTOs, appended across pages until the next full load
        can_load_more: whether the last page was full
        loading / loaded: load progress flags
        columns / records: render projection rebuilt after every page
    """

    allow_range_filtering = True
    allow_search_filtering = True

    def __init__(self, services):
        super().__init__(services)
        self.items: List[TItem] = []
        self.can_load_more = False
        self.loaded = False
        self.search = ""
        self.range_from: Optional[datetime] = None
        self.range_to: Optional[datetime] = None
        self.columns: List[ListColumn] = []
        self.records: List[ListRecord] = []

    @property
    def is_empty(self) -> bool:
        return self.loaded and not self.items

    async def initialize_async(self) -> None:
        if not self.check_authentication():
            return
        await self.load_async()

    async def load_async(self) -> None:
        """Full reload. Exceptions from the page fetch propagate; flags are reset either way."""
        self.loading = True
        self.loaded = False
        self.raise_state_changed()
        try:
            self.items.clear()
            self.can_load_more = False
            async with log_timing_async(f"{type(self).__name__}.load") as ctx:
                await self.load_page_async(reset_paging=True)
                ctx["items"] = len(self.items)
            with log_timing(f"{type(self).__name__}.build_records", extra={"items": len(self.items)}):
                self.build_records()
        finally:
            self.loading = False
            self.loaded = True
            self.raise_state_changed()

    async def reload_async(self) -> None:
        await self.load_async()

    async def load_more_async(self) -> None:
        if not self.can_load_more:
            return
        self.loading = True
        self.raise_state_changed()
        try:
            async with log_timing_async(f"{type(self).__name__}.load_more") as ctx:
                await self.load_page_async(reset_paging=False)
                ctx["items"] = len(self.items)
            with log_timing(f"{type(self).__name__}.build_records", extra={"items": len(self.items)}):
                self.build_records()
        finally:
            self.loading = False
            self.raise_state_changed()

    @abstractmethod
    async def load_page_async(self, reset_paging: bool) -> None:
        """
        Fetch the next page into ``items`` and update ``can_load_more``.

        Args:
            reset_paging: True on a full reload; the page cursor restarts at 0

        Exceptions propagate to ``load_async``/``load_more_async``.
        """

    def build_records(self) -> None:
        """Default projection: one text column holding ``str(item)``."""
        self.columns = [ListColumn("__default", "Item")]
        self.records = [
            ListRecord([ListCell.of_text("" if item is None else str(item))], item)
            for item in self.items
        ]

    def get_navigate_url(self, item: TItem) -> Optional[str]:
        """Card URL opened when a row is clicked; None for rows without a card."""
        return None

    def set_records(self, columns: List[ListColumn], records: List[ListRecord]) -> None:
        validate_records(columns, records)
        self.columns = columns
        self.records = records

    def set_search(self, value: Optional[str]) -> None:
        self.search = value or ""

    def clear_search(self) -> None:
        self.set_search("")

    def set_range(self, date_from: Optional[datetime], date_to: Optional[datetime]) -> None:
        self.range_from = date_from
        self.range_to = date_to

    def clear_range(self) -> None:
        self.set_range(None, None)

    def reset_and_search(self) -> None:
        self.items.clear()
        self.can_load_more = True
