"""FastAPI dependency injection and domain-error translation.

Usage in route handlers::

    @router.post("/things")
    async def create_thing(deck: Deck, body: ThingCreate) -> Thing:
        with translate_errors():
            return await deck.things.create(body.name)
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from notedeck.deck import NoteDeck
from notedeck.errors import ConstraintViolation, NotFoundError, StoreIOError, StoreValidationError


def get_deck(request: Request) -> NoteDeck:
    """Return the process-wide ``NoteDeck`` created in the app lifespan."""
    deck: NoteDeck | None = getattr(request.app.state, "deck", None)
    if deck is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="notedeck is not started.",
        )
    return deck


@contextmanager
def translate_errors() -> Iterator[None]:
    """Map domain exceptions onto HTTP status codes."""
    try:
        yield
    except NotFoundError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ConstraintViolation as exc:
        raise HTTPException(status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except StoreValidationError as exc:
        raise HTTPException(422, detail=exc.errors) from exc
    except StoreIOError as exc:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


# -- Annotated type aliases for concise route signatures ---------------------

Deck = Annotated[NoteDeck, Depends(get_deck)]
"""Annotated dependency: the running ``NoteDeck``."""
