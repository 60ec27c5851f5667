"""
Headless state model for the perk directory screen.

The view never filters on its own: every filter change goes back to the
API and the screen shows whatever the newest request returned.  Each
request is stamped with a generation number; a response that arrives
after a newer request was issued is dropped, so a slow, superseded
query can never overwrite the results of the current one.

Errors keep the last good results on screen and set ``error`` so the
caller can tell "the request failed" apart from "nothing matched".
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .client import PerkPage, PerksClient
from .errors import PerkHubError

logger = logging.getLogger(__name__)

EMPTY_TEXT = "No perks match your filters."


@dataclass
class DirectoryFilters:
    title: str = ""
    merchant: str = ""
    category: str = ""

    def as_kwargs(self) -> dict[str, str]:
        return {"title": self.title, "merchant": self.merchant, "category": self.category}


class DirectoryView:
    def __init__(self, client: PerksClient) -> None:
        self.client = client
        self.filters = DirectoryFilters()
        self.perks: list[dict[str, Any]] = []
        self.page: PerkPage | None = None
        self.merchant_options: list[str] = []
        self.error: str | None = None
        self.loading = False
        self._generation = 0

    @property
    def loaded(self) -> bool:
        return self.page is not None

    @property
    def summary(self) -> str | None:
        if self.page is None:
            return None
        return self.page.summary

    async def mount(self) -> None:
        self.filters = DirectoryFilters()
        try:
            self.merchant_options = await self.client.list_merchants()
        except PerkHubError as exc:
            # the selector just stays empty
            logger.warning("could not load merchant options: %s", exc)
        await self.refresh()

    async def change_title(self, value: str) -> None:
        """The title box searches as you type."""
        self.filters.title = value
        await self.refresh()

    def change_merchant(self, value: str) -> None:
        self.filters.merchant = value

    def change_category(self, value: str) -> None:
        self.filters.category = value

    async def submit(self) -> None:
        """The "Search now" button."""
        await self.refresh()

    async def refresh(self) -> None:
        self._generation += 1
        generation = self._generation
        self.loading = True
        try:
            page = await self.client.list_perks(**self.filters.as_kwargs())
        except PerkHubError as exc:
            if generation != self._generation:
                logger.debug("dropping error from superseded request %s", generation)
                return
            self.loading = False
            self.error = exc.message
            logger.warning("perk list request failed: %s", exc)
            return

        if generation != self._generation:
            logger.debug("dropping superseded response %s (current %s)", generation, self._generation)
            return

        self.loading = False
        self.page = page
        self.perks = page.perks
        self.error = None

    def render(self) -> str:
        lines: list[str] = []
        if self.error:
            lines.append(f"Error: {self.error}")
        if self.page is None:
            if not self.error:
                lines.append("Loading perks...")
            return "\n".join(lines)

        lines.append(self.page.summary)
        if not self.perks:
            lines.append(EMPTY_TEXT)
        for perk in self.perks:
            discount = perk.get("discountPercent")
            discount_text = f"{discount:g}% off" if isinstance(discount, (int, float)) else ""
            lines.append(
                " | ".join(
                    part
                    for part in (perk.get("title", ""), perk.get("merchant", ""), perk.get("category", ""), discount_text)
                    if part
                )
            )
        return "\n".join(lines)
