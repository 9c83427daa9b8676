"""Whole-store endpoints: export, import and reset."""

from __future__ import annotations

from fastapi import APIRouter, Response

from notedeck.deps import Deck, translate_errors
from notedeck.models.api import DataImport
from notedeck.models.workspace import StoreDocument

router = APIRouter(prefix="/data", tags=["data"])


@router.get("/export")
async def export_data(deck: Deck) -> Response:
    """The store document exactly as it is written to disk."""
    return Response(content=deck.data.export_data(), media_type="application/json")


@router.post("/import", response_model=StoreDocument)
async def import_data(body: DataImport, deck: Deck) -> StoreDocument:
    """Replace the store with an exported document.  Invalid content is a 422."""
    with translate_errors():
        return await deck.data.import_data(body.content)


@router.post("/reset", response_model=StoreDocument)
async def reset_data(deck: Deck) -> StoreDocument:
    with translate_errors():
        return await deck.data.reset_to_default()
