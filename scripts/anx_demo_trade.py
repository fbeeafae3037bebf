"""
Command-line helper for ANX market data, orders and account checks.

Usage examples:
    python scripts/anx_demo_trade.py ticker --pair BTCUSD

    python scripts/anx_demo_trade.py place \
        --side buy --type limit --traded BTC --settlement USD \
        --amount 0.01 --price 24000

    python scripts/anx_demo_trade.py cancel --order-id 6a7c... --order-id 91d2...

    python scripts/anx_demo_trade.py fee --kind trade --amount 1 --price 24000

Environment variables:
    ANX_API_KEY
    ANX_API_SECRET (base64, as issued by ANX)
    ANX_API_URL (optional)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Any

from exchanges.anx import AnxClient, AnxError, AnxSettings
from exchanges.anx.schemas import FeeKind, FeeRequest, Order, ReplaceSpec

LOG_FORMAT = "%(asctime)s | %(levelname)s %(name)s | %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ANX Trade Helper")
    parser.add_argument("--verbose", action="store_true", help="Log request traces")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ticker_parser = subparsers.add_parser("ticker", help="Show the ticker for a pair")
    ticker_parser.add_argument("--pair", required=True, help="ANX pair, e.g. BTCUSD")

    depth_parser = subparsers.add_parser("depth", help="Show the order book for a pair")
    depth_parser.add_argument("--pair", required=True, help="ANX pair, e.g. BTCUSD")
    depth_parser.add_argument("--levels", type=int, default=10, help="Levels per side to print")

    place_parser = subparsers.add_parser("place", help="Submit an order to ANX")
    place_parser.add_argument("--side", required=True, choices=["buy", "sell"], help="Order side")
    place_parser.add_argument("--type", default="limit", choices=["limit", "market"], help="Order type")
    place_parser.add_argument("--traded", required=True, help="Traded currency, e.g. BTC")
    place_parser.add_argument("--settlement", required=True, help="Settlement currency, e.g. USD")
    place_parser.add_argument(
        "--amount",
        required=True,
        type=float,
        help="Traded amount when buying, settlement amount when selling",
    )
    place_parser.add_argument("--price", type=float, help="Limit price in settlement currency")
    place_parser.add_argument("--replace", help="Existing order id to cancel and replace")
    place_parser.add_argument(
        "--replace-any-state",
        action="store_true",
        help="Replace even if the existing order is no longer active",
    )

    cancel_parser = subparsers.add_parser("cancel", help="Cancel one or more ANX orders")
    cancel_parser.add_argument("--order-id", action="append", required=True, help="Order id (repeatable)")

    orders_parser = subparsers.add_parser("orders", help="List orders")
    orders_parser.add_argument("--all", action="store_true", help="Include inactive orders")

    info_parser = subparsers.add_parser("info", help="Show a single order")
    info_parser.add_argument("--order-id", required=True, help="Order id")

    subparsers.add_parser("account", help="Show balances and rights")

    fee_parser = subparsers.add_parser("fee", help="Quote a fee")
    fee_parser.add_argument("--kind", required=True, choices=[kind.value for kind in FeeKind])
    fee_parser.add_argument("--amount", type=float, default=0.0)
    fee_parser.add_argument("--price", type=float, default=0.0)
    fee_parser.add_argument("--maker", action="store_true")
    fee_parser.add_argument("--currency", default="")
    return parser


def run(args: argparse.Namespace, client: AnxClient) -> Any:
    if args.command == "ticker":
        return asdict(client.get_ticker(args.pair))
    if args.command == "depth":
        book = client.get_order_book(args.pair)
        return {
            "pair": book.pair,
            "asks": [asdict(level) for level in book.asks[: args.levels]],
            "bids": [asdict(level) for level in book.bids[: args.levels]],
        }
    if args.command == "place":
        is_buy = args.side == "buy"
        order = Order(
            order_type=args.type.upper(),
            is_buy=is_buy,
            traded_currency=args.traded,
            settlement_currency=args.settlement,
            traded_amount=args.amount if is_buy else None,
            settlement_amount=None if is_buy else args.amount,
            limit_price=args.price,
            replace=ReplaceSpec(args.replace, only_if_active=not args.replace_any_state) if args.replace else None,
        )
        return {"order_id": client.submit_order(order)}
    if args.command == "cancel":
        failures = client.cancel_orders(args.order_id)
        return {"failed": failures, "cancelled": [oid for oid in args.order_id if oid not in failures]}
    if args.command == "orders":
        return [asdict(record) for record in client.list_orders(active_only=not args.all)]
    if args.command == "info":
        return asdict(client.get_order_info(args.order_id))
    if args.command == "account":
        info = client.get_account_info()
        client.check_withdrawal_permission()
        return {
            "rights": sorted(info.rights),
            "wallets": {ccy: asdict(wallet) for ccy, wallet in info.wallets.items()},
            "trade_fee": info.trade_fee,
        }
    # fee
    request = FeeRequest(
        kind=FeeKind(args.kind),
        amount=args.amount,
        price=args.price,
        is_maker=args.maker,
        currency=args.currency.upper(),
    )
    return {"fee": client.get_fee_by_type(request)}


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    client = AnxClient(AnxSettings.from_env())
    try:
        response = run(args, client)
    except AnxError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        client.close()

    print(json.dumps(response, indent=2, default=str))


if __name__ == "__main__":
    main()
