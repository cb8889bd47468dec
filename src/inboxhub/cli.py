"""Summary: Command-line interface for InboxHub.

Importance: Provides a local entry point for managing integrations and reading the inbox.
Alternatives: Use a CLI framework like Typer or Click.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

import uvicorn

from inboxhub.api import create_app
from inboxhub.app import build_services
from inboxhub.config import AppConfig
from inboxhub.http_client import create_client_session
from inboxhub.models import Provider


def build_parser() -> argparse.ArgumentParser:
    """Summary: Build the CLI argument parser.

    Importance: Defines supported commands for local operation.
    Alternatives: Use a CLI framework like Typer or Click.
    """

    parser = argparse.ArgumentParser(description="InboxHub CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)
    providers = [provider.value for provider in Provider]

    add_user = subparsers.add_parser("add-user", help="Create a user")
    add_user.add_argument("display_name", type=str, nargs="?", default=None)
    add_user.add_argument("email", type=str, nargs="?", default=None)

    connect = subparsers.add_parser("connect", help="Store provider credentials for a user")
    connect.add_argument("user_id", type=int)
    connect.add_argument("provider", choices=providers)
    connect.add_argument("access_token", type=str)
    connect.add_argument("--refresh-token", type=str, default=None)
    connect.add_argument("--expires-at", type=str, default=None)

    disconnect = subparsers.add_parser("disconnect", help="Remove provider credentials")
    disconnect.add_argument("user_id", type=int)
    disconnect.add_argument("provider", choices=providers)

    list_integrations = subparsers.add_parser("list-integrations", help="List connected providers")
    list_integrations.add_argument("user_id", type=int)

    inbox = subparsers.add_parser("inbox", help="Print the merged inbox as JSON")
    inbox.add_argument("user_id", type=int)

    subparsers.add_parser("serve", help="Run the HTTP API")
    return parser


async def _run(args: argparse.Namespace, config: AppConfig) -> None:
    async with create_client_session(config.http_timeout_seconds) as session:
        services = build_services(config, session)

        if args.command == "add-user":
            display_name = args.display_name or config.default_user_name
            email = args.email or config.default_user_email
            user_id = services.users.create_user(display_name, email)
            print(f"User {user_id} ({email}).")
            return

        if args.command == "connect":
            services.integrations.connect(
                args.user_id,
                Provider(args.provider),
                args.access_token,
                args.refresh_token,
                args.expires_at,
            )
            print(f"Connected {args.provider} for user {args.user_id}.")
            return

        if args.command == "disconnect":
            if services.integrations.disconnect(args.user_id, Provider(args.provider)):
                print(f"Disconnected {args.provider} for user {args.user_id}.")
            else:
                print(f"No {args.provider} integration for user {args.user_id}.")
            return

        if args.command == "list-integrations":
            for integration in services.integrations.list_integrations(args.user_id):
                print(
                    f"{integration.provider.value} "
                    f"(expires: {integration.expires_at or 'never'}, "
                    f"updated: {integration.updated_at})"
                )
            return

        if args.command == "inbox":
            bundle = await services.aggregator.get_messages(args.user_id)
            print(json.dumps(bundle.to_dict(), indent=2, default=str))
            return


def run_cli() -> None:
    """Summary: Parse arguments and dispatch the selected command.

    Importance: Single entry point for the console script.
    Alternatives: Expose one script per command.
    """

    parser = build_parser()
    args = parser.parse_args()
    config = AppConfig.from_env()
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "serve":
        uvicorn.run(create_app(config), host=config.api_host, port=config.api_port)
        return

    asyncio.run(_run(args, config))


if __name__ == "__main__":
    run_cli()
