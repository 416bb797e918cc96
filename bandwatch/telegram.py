from __future__ import annotations

from typing import Optional

import requests

from .logger import get_logger

logger = get_logger(__name__)


class TelegramNotifier:
    """Sends Markdown messages to one chat through the Telegram Bot API.

    Token and chat id are given at construction; a notifier missing either is
    disabled and only logs what it would have sent.
    """

    BASE_URL = "https://api.telegram.org"

    def __init__(
        self,
        token: Optional[str],
        chat_id: Optional[str | int],
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ) -> None:
        self.token = token
        self.chat_id = chat_id
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.chat_id)

    def send(self, text: str) -> bool:
        if not self.enabled:
            logger.info(f"Telegram disabled, message not sent: {text}")
            return False

        try:
            response = self.session.post(
                f"{self.BASE_URL}/bot{self.token}/sendMessage",
                data={"chat_id": self.chat_id, "text": text, "parse_mode": "Markdown"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as exc:
            logger.warning(f"Failed to send message: {text} ({exc})")
            return False
        return True
