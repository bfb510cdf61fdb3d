"""
Notification Sink

The cart store reports user-facing failures through a `notify(message)`
callable. Delivery (toast, snackbar, stderr) belongs to the presenter;
this module only provides message texts and two simple sinks.
"""
from typing import Callable, List

from rocketcart import config
from rocketcart.errors import (
    ERROR_ADD_FAILED,
    ERROR_OUT_OF_STOCK,
    ERROR_REMOVE_FAILED,
    ERROR_UPDATE_FAILED,
)
from rocketcart.logging import get_logger

logger = get_logger(__name__)

Notifier = Callable[[str], None]

DEFAULT_LANGUAGE = "en"

MESSAGES = {
    "en": {
        ERROR_ADD_FAILED: "Product addition failed",
        ERROR_REMOVE_FAILED: "Product removal failed",
        ERROR_UPDATE_FAILED: "Product amount update failed",
        ERROR_OUT_OF_STOCK: "Requested quantity out of stock",
    },
    "pt": {
        ERROR_ADD_FAILED: "Erro na adição do produto",
        ERROR_REMOVE_FAILED: "Erro na remoção do produto",
        ERROR_UPDATE_FAILED: "Erro na alteração de quantidade do produto",
        ERROR_OUT_OF_STOCK: "Quantidade solicitada fora de estoque",
    },
}


def detect_language(language_code: str | None) -> str:
    """Normalize a language code ("pt-BR" -> "pt"), falling back to English."""
    if not language_code:
        return DEFAULT_LANGUAGE
    lang = language_code.split("-")[0].split("_")[0].lower()
    return lang if lang in MESSAGES else DEFAULT_LANGUAGE


def get_text(key: str, lang: str = DEFAULT_LANGUAGE) -> str:
    """Message for `key` in `lang`; English when the language lacks it."""
    texts = MESSAGES[detect_language(lang)]
    return texts.get(key) or MESSAGES[DEFAULT_LANGUAGE].get(key, key)


class LoggingNotifier:
    """Writes notifications to the log. Default sink for headless use."""

    def __call__(self, message: str) -> None:
        logger.warning(f"Cart notification: {message}")


class CollectingNotifier:
    """Keeps every message in order; handy for tests and the CLI."""

    def __init__(self):
        self.messages: List[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)

    def clear(self) -> None:
        self.messages.clear()


def default_language() -> str:
    return detect_language(config.notify_language())


__all__ = [
    "Notifier",
    "MESSAGES",
    "detect_language",
    "get_text",
    "default_language",
    "LoggingNotifier",
    "CollectingNotifier",
]
