"""
Zacks Rank Adapter

Reads the Zacks Rank from the public quote feed used by zacks.com pages.
The feed is unofficial, so every failure simply means "no rating".
"""

import logging
from typing import Optional, Any, Dict

import aiohttp

from stocklens.core.config import settings
from stocklens.schemas.market import ZacksRating

logger = logging.getLogger(__name__)


RANK_LABELS = {
    1: "Strong Buy",
    2: "Buy",
    3: "Hold",
    4: "Sell",
    5: "Strong Sell",
}


def parse_zacks_rating(symbol: str, payload: Dict[str, Any]) -> Optional[ZacksRating]:
    """
    Extract the rank for `symbol` from a quote-feed payload.

    Payload shape: {"AAPL": {"zacks_rank": "3", "zacks_rank_text": "Hold", "updated": "..."}}
    """
    symbol = symbol.upper()
    entry = payload.get(symbol)
    if not isinstance(entry, dict):
        return None

    try:
        rank = int(entry.get("zacks_rank"))
    except (TypeError, ValueError):
        return None

    if rank not in RANK_LABELS:
        return None

    return ZacksRating(
        symbol=symbol,
        rank=rank,
        rank_text=(entry.get("zacks_rank_text") or "").strip() or RANK_LABELS[rank],
        updated_at=entry.get("updated") or None,
    )


class ZacksClient:
    """Async client for the Zacks quote feed."""

    def __init__(self, base_url: Optional[str] = None):
        self._base_url = base_url or settings.zacks_base_url
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=settings.http_timeout_seconds),
                headers={
                    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
                },
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def get_rating(self, symbol: str) -> Optional[ZacksRating]:
        """Zacks Rank for a symbol, or None."""
        try:
            session = await self._ensure_session()
            async with session.get(self._base_url, params={"t": symbol.upper()}) as response:
                if response.status != 200:
                    logger.warning(f"Zacks feed returned status {response.status} for {symbol}")
                    return None
                payload = await response.json(content_type=None)
        except Exception as e:
            logger.error(f"Error fetching Zacks rating for {symbol}: {e}")
            return None

        return parse_zacks_rating(symbol, payload or {})
