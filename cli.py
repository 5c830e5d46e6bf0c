#!/usr/bin/env python3
"""Simple CLI for exercising the navigation wallet session locally"""

import argparse
import asyncio

from walletnav.config import settings
from walletnav.logging_config import setup_logging
from walletnav.providers.factory import build_provider
from walletnav.views import NavigationHost, render_text


def print_navigation(host: NavigationHost) -> None:
    """Pretty print the navigation bar"""
    print("\n" + "=" * 50)
    print(render_text(host.view.render()))
    print("=" * 50)


async def _mounted_host() -> NavigationHost:
    host = NavigationHost(build_provider(settings))
    await host.mount()
    await host.manager.settle()
    return host


async def cli_status():
    """Show the navigation bar after non-intrusive discovery"""
    host = await _mounted_host()
    try:
        print_navigation(host)
    finally:
        await host.unmount()


async def cli_connect():
    """Request account access and show the result"""
    host = await _mounted_host()
    try:
        print(f"🔌 Connecting to {settings.wallet_name}...")
        await host.view.connect()
        await host.manager.settle()
        print_navigation(host)
    finally:
        await host.unmount()


async def cli_transfer():
    """Connect if needed, then send the example transfer"""
    host = await _mounted_host()
    try:
        if not host.manager.session.is_connected:
            await host.view.connect()
            await host.manager.settle()

        result = await host.view.send_example_transfer()
        print(("✅ " if result.success else "❌ ") + result.message)
        print_navigation(host)
    finally:
        await host.unmount()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Storefront navigation wallet CLI")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("status", help="Show the navigation bar without prompting the wallet")
    subparsers.add_parser("connect", help="Connect the wallet")
    subparsers.add_parser("transfer", help="Send the example transfer")

    return parser


async def main():
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.log_level)

    if not args.command:
        parser.print_help()
        return

    command = args.command.lower()

    if command == "status":
        await cli_status()

    elif command == "connect":
        await cli_connect()

    elif command == "transfer":
        await cli_transfer()

    else:
        print(f"❌ Unknown command: {command}")
        parser.print_help()


if __name__ == "__main__":
    asyncio.run(main())
