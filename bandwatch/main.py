from concurrent.futures import ThreadPoolExecutor
import time
from datetime import datetime
from typing import Optional

from bandwatch.binance import BinanceClient
from bandwatch.config import (
    BALANCE_AWARE,
    MARKETS,
    MAX_THREADS,
    TELEGRAM_BOT_TOKEN,
    TELEGRAM_CHAT_ID,
    TRADING_FREQUENCY_MS,
)
from bandwatch.logger import get_logger
from bandwatch.telegram import TelegramNotifier
from bandwatch.watcher import Evaluation, Market, watch_market

logger = get_logger(__name__)


def run_watch_market(market: Market, client: BinanceClient, notifier: TelegramNotifier,
                     balance_aware: bool = False) -> Optional[Evaluation]:
    """
    Worker function to evaluate a single market in a thread.
    """
    try:
        return watch_market(market, client, notifier, balance_aware=balance_aware)
    except Exception as e:
        logger.error(f"Error processing {market}: {e}")
        return None


def run_cycle(markets: list[Market], client: BinanceClient, notifier: TelegramNotifier,
              balance_aware: bool = False) -> list[Optional[Evaluation]]:
    """
    Evaluate every market once; one failing market never stops the others.
    """
    with ThreadPoolExecutor(MAX_THREADS) as executor:
        futures = [executor.submit(run_watch_market, market, client, notifier, balance_aware) for market in markets]
        return [future.result() for future in futures]


def balance_gating_enabled(client: BinanceClient, requested: bool = BALANCE_AWARE) -> bool:
    """Balance gating needs signed requests; without API keys it is switched off once, at start-up."""
    if requested and not client.can_sign:
        logger.error("BALANCE_AWARE is set but Binance API keys are missing. Running without balance gating.")
        return False
    return requested


def main_loop():
    """
    Main loop to run the market watcher.
    """
    markets = [Market.parse(pair) for pair in MARKETS]
    client = BinanceClient()
    notifier = TelegramNotifier(TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID)
    balance_aware = balance_gating_enabled(client)
    notifier.send("Hello every body, I'm ready to go!")
    logger.info(f"Watching {len(markets)} markets: {[str(m) for m in markets]}")

    try:
        while True:
            logger.info(f"--- Starting new evaluation cycle at {datetime.now()} ---")
            try:
                run_cycle(markets, client, notifier, balance_aware)
            except Exception as e:
                logger.error(f"An error occurred in the main loop: {e}")

            logger.info(f"--- Cycle finished. Waiting for {TRADING_FREQUENCY_MS / 1000} seconds... ---")
            time.sleep(TRADING_FREQUENCY_MS / 1000)
    except KeyboardInterrupt:
        logger.info("Market watcher exited")


if __name__ == "__main__":
    main_loop()
