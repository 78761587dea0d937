"""Close every expired auction once, for cron or any external scheduler.

Usage: python -m src.am_auction.sweep [--limit N]
"""

import argparse
import asyncio
import logging

from config.settings import settings
from src.am_auction.application.service import AuctionApplicationService
from src.am_common.database import async_session_factory, engine

logger = logging.getLogger("am.auction.sweep")


async def run_sweep(limit: int) -> int:
    service = AuctionApplicationService()
    try:
        async with async_session_factory() as db:
            closed = await service.close_expired(db, limit)
    finally:
        await engine.dispose()
    for auction in closed:
        logger.info(
            "closed %s winner=%s price=%d", auction.id, auction.winner_id, auction.current_price
        )
    return len(closed)


def main() -> None:
    parser = argparse.ArgumentParser(description="Close every expired auction once")
    parser.add_argument("--limit", type=int, default=100, help="max auctions to close")
    args = parser.parse_args()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    count = asyncio.run(run_sweep(args.limit))
    logger.info("Sweep finished: %d auction(s) closed", count)


if __name__ == "__main__":
    main()
