"""
Command-line access to the persisted cart.

Usage:
    python -m rocketcart show
    python -m rocketcart add 1
    python -m rocketcart set 1 3
    python -m rocketcart remove 1
    python -m rocketcart check

Runs one operation against the configured inventory API and storage slot
(see rocketcart.config), prints notifications and the resulting cart.
A .env file in the working directory is loaded first; settings given on
the command line win over the environment.
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from dotenv import load_dotenv

from rocketcart import config
from rocketcart.cart import CartStore, CartSnapshot, Outcome, build_storage
from rocketcart.inventory import HttpInventoryGateway
from rocketcart.logging import setup_logging
from rocketcart.notifications import CollectingNotifier


def _format_cart(snapshot: CartSnapshot) -> str:
    size = snapshot.cart_size
    lines = [f"Cart: {size} item" if size == 1 else f"Cart: {size} items"]
    for item in snapshot:
        lines.append(f"  #{item.id:<5} {item.name[:40]:<40} x{item.amount:<3} {item.price}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rocketcart",
        description="Inspect and modify the persisted shopping cart",
    )
    parser.add_argument("--api-url", help="Inventory API base URL (INVENTORY_API_URL)")
    parser.add_argument(
        "--storage",
        choices=config.STORAGE_BACKENDS,
        help="Cart storage backend (CART_STORAGE_BACKEND)",
    )
    parser.add_argument("--path", help="Cart file for the file backend (CART_STORAGE_PATH)")
    parser.add_argument("--lang", help="Notification language, en or pt (NOTIFY_LANGUAGE)")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("show", help="Print the cart")
    commands.add_parser("check", help="List lines that exceed current stock")

    add = commands.add_parser("add", help="Add one unit of a product")
    add.add_argument("product_id", type=int)

    remove = commands.add_parser("remove", help="Remove a product line")
    remove.add_argument("product_id", type=int)

    update = commands.add_parser("set", help="Set the amount of a product line")
    update.add_argument("product_id", type=int)
    update.add_argument("amount", type=int)

    return parser


async def run(args: argparse.Namespace) -> int:
    notifier = CollectingNotifier()
    storage = build_storage(args.storage, path=args.path)

    async with HttpInventoryGateway(args.api_url) as gateway:
        store = await CartStore.open(gateway, storage, notify=notifier, language=args.lang)

        if args.command == "show":
            print(_format_cart(store.snapshot))
            return 0

        if args.command == "check":
            over = await store.check_stock()
            if over is None:
                print("Stock listing unavailable", file=sys.stderr)
                return 1
            for product_id, available in over.items():
                print(f"  #{product_id}: only {available} in stock")
            return 1 if over else 0

        if args.command == "add":
            result = await store.add_product(args.product_id)
        elif args.command == "remove":
            result = await store.remove_product(args.product_id)
        else:
            result = await store.update_product_amount(args.product_id, args.amount)

    for message in notifier.messages:
        print(f"! {message}", file=sys.stderr)
    print(_format_cart(result.snapshot))
    return 0 if result.outcome in (Outcome.UPDATED, Outcome.UNCHANGED) else 1


def _apply_environment(args: argparse.Namespace) -> None:
    """Fill unset options from the environment. Raises ConfigError."""
    args.api_url = args.api_url or config.inventory_api_url()
    args.storage = args.storage or config.cart_storage_backend()
    args.path = args.path or config.cart_storage_path()
    args.lang = args.lang or config.notify_language()
    config.inventory_timeout()
    if args.storage == "redis":
        config.cart_ttl()


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    setup_logging()

    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        _apply_environment(args)
    except config.ConfigError as e:
        parser.error(str(e))
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
