"""
Configuration - environment-driven settings.

Values are read from the environment each time an accessor is called, so
a `.env` loaded by the CLI (or variables set by a host process) take effect
without re-importing anything. Components take explicit arguments; these
are only defaults for the CLI and build_* helpers.
"""

import os

STORAGE_BACKENDS = ("file", "redis", "memory")


class ConfigError(ValueError):
    """An environment variable holds a value rocketcart cannot use."""


# Inventory API

def inventory_api_url() -> str:
    return os.environ.get("INVENTORY_API_URL", "http://localhost:3333")


def inventory_timeout() -> float:
    raw = os.environ.get("INVENTORY_TIMEOUT", "5.0")
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigError(f"INVENTORY_TIMEOUT must be a number of seconds, got {raw!r}")
    if timeout <= 0:
        raise ConfigError(f"INVENTORY_TIMEOUT must be positive, got {raw!r}")
    return timeout


# Persistence slot

def cart_storage_key() -> str:
    return os.environ.get("CART_STORAGE_KEY", "@RocketShoes:cart")


def cart_storage_backend() -> str:
    backend = os.environ.get("CART_STORAGE_BACKEND", "file").lower()
    if backend not in STORAGE_BACKENDS:
        raise ConfigError(
            f"CART_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}"
        )
    return backend


def cart_storage_path() -> str:
    return os.environ.get("CART_STORAGE_PATH", ".rocketcart/cart.json")


def cart_ttl() -> int:
    """Redis slot expiry in seconds. 0 = no expiry; the cart outlives the session."""
    raw = os.environ.get("CART_TTL", "0")
    try:
        ttl = int(raw)
    except ValueError:
        raise ConfigError(f"CART_TTL must be a whole number of seconds, got {raw!r}")
    if ttl < 0:
        raise ConfigError(f"CART_TTL must not be negative, got {raw!r}")
    return ttl


# Upstash Redis - standard env var names per docs

def upstash_redis_rest_url() -> str:
    return os.environ.get("UPSTASH_REDIS_REST_URL", "")


def upstash_redis_rest_token() -> str:
    return os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")


# Notifications

def notify_language() -> str:
    return os.environ.get("NOTIFY_LANGUAGE", "en")


def validate() -> None:
    """Raise ConfigError for the first unusable setting."""
    inventory_timeout()
    cart_storage_backend()
    cart_ttl()
