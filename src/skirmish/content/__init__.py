"""Static content loading (skills, characters, encounters, party)."""

from __future__ import annotations

from skirmish.content.catalog import CatalogDocument, ContentCatalog, PartySlot


__all__ = [
    "CatalogDocument",
    "ContentCatalog",
    "PartySlot",
]
