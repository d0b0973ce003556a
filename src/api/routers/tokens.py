"""Token board endpoints: list with search/filter/sort, manual refresh."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_board
from src.parsers.token_board import BoardFilter, BoardSort, TokenBoard

router = APIRouter(prefix="/api/v1/tokens", tags=["tokens"])


@router.get("")
async def list_tokens(
    board: TokenBoard = Depends(get_board),
    search: str = Query("", max_length=100),
    status_filter: BoardFilter = Query(BoardFilter.TRENDING, alias="filter"),
    sort: BoardSort = Query(BoardSort.MCAP),
    limit: int = Query(100, ge=1, le=500),
) -> dict[str, Any]:
    """Current listings. Enrichment fields fill in while ``enriching`` is true."""
    tokens = board.query(search=search, status_filter=status_filter, sort=sort)
    return {
        "tokens": [t.model_dump(mode="json") for t in tokens[:limit]],
        "total": len(tokens),
        "loading": board.loading,
        "enriching": board.enriching,
    }


@router.post("/refresh")
async def refresh_tokens(board: TokenBoard = Depends(get_board)) -> dict[str, Any]:
    """Re-read curves and metadata; cancels any enrichment still running."""
    listings = await board.refresh()
    return {"ok": True, "total": len(listings), "enriching": board.enriching}
