"""
Command-line interface for the top.gg client.

Exposes every API operation and the vote webhook listener as subcommands.
Results are printed to stdout as JSON.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from ..clients.api_client import ApiClientError, TopggClient
from ..config.config_loader import ConfigurationError, TopggConfigLoader
from ..config.settings import TopggSettings, get_settings
from ..webhook.listener import WebhookBindError, WebhookListener

logger = logging.getLogger(__name__)


class TopggCLI:
    """
    Command-line interface for the top.gg client.
    """

    def __init__(self):
        """Initialize the CLI."""
        self.settings: Optional[TopggSettings] = None

    async def run(self, args: Optional[list] = None) -> int:
        """
        Run the CLI with the given arguments.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            int: Exit code
        """
        parser = self._create_parser()
        parsed_args = parser.parse_args(args)

        if parsed_args.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        if not parsed_args.command:
            parser.print_help()
            return 1

        try:
            self.settings = self._load_settings(parsed_args.config)

            if parsed_args.command == "listen":
                return await self._execute_listen(parsed_args)
            return await self._execute_client_command(parsed_args)

        except ConfigurationError as e:
            logger.error(f"Configuration error: {e}")
            return 1
        except ApiClientError as e:
            logger.error(f"Request failed: {e}")
            return 1
        except ValueError as e:
            logger.error(f"Invalid arguments: {e}")
            return 1
        except WebhookBindError as e:
            logger.error(str(e))
            return 1

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create command line argument parser."""
        parser = argparse.ArgumentParser(
            prog="topgg",
            description="top.gg client - query bots, users and votes, publish stats, receive votes",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Show your own bot's listing
  topgg bot

  # Check whether a user voted for your bot
  topgg check --user 195512978634833920

  # Publish the server count
  topgg post-stats --server-count 142

  # Receive vote webhooks on port 5000
  topgg listen --port 5000 --secret my-secret
            """,
        )

        # Global options
        parser.add_argument(
            "--config",
            help="YAML configuration file (default: environment variables only)",
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose logging"
        )

        subparsers = parser.add_subparsers(dest="command", help="Available commands")

        bot_parser = subparsers.add_parser("bot", help="Show a bot's listing")
        bot_parser.add_argument("--id", help="Bot ID (default: your bot)")

        user_parser = subparsers.add_parser("user", help="Show a user profile")
        user_parser.add_argument("--id", required=True, help="User ID")

        votes_parser = subparsers.add_parser("votes", help="List a bot's voters")
        votes_parser.add_argument("--id", help="Bot ID (default: your bot)")
        votes_parser.add_argument(
            "--ids-only", action="store_true", help="Only print voter IDs"
        )

        check_parser = subparsers.add_parser(
            "check", help="Check whether a user voted for a bot"
        )
        check_parser.add_argument("--user", required=True, help="User ID")
        check_parser.add_argument("--bot", help="Bot ID (default: your bot)")

        stats_parser = subparsers.add_parser("stats", help="Show a bot's stats")
        stats_parser.add_argument("--id", help="Bot ID (default: your bot)")

        post_parser = subparsers.add_parser(
            "post-stats", help="Publish your bot's stats"
        )
        post_parser.add_argument("--server-count", type=int, help="Server count")
        post_parser.add_argument(
            "--shards", type=int, nargs="+", help="Server count of every shard"
        )
        post_parser.add_argument(
            "--shard-id", type=int, help="Shard the server count belongs to"
        )
        post_parser.add_argument("--shard-count", type=int, help="Number of shards")

        listen_parser = subparsers.add_parser(
            "listen", help="Receive vote webhooks and print them"
        )
        listen_parser.add_argument("--host", help="Interface to bind")
        listen_parser.add_argument("--port", type=int, help="Port to bind")
        listen_parser.add_argument("--path", help="Route top.gg posts to")
        listen_parser.add_argument("--secret", help="Webhook authorization secret")

        return parser

    def _load_settings(self, config_path: Optional[str]) -> TopggSettings:
        if config_path:
            return TopggConfigLoader(config_path).load()
        return get_settings()

    async def _execute_client_command(self, args: argparse.Namespace) -> int:
        """Execute a command that talks to the API."""
        if self.settings.bot_id is None or not self.settings.token:
            raise ConfigurationError("bot_id and token are required (set TOPGG_BOT_ID and TOPGG_TOKEN)")

        async with TopggClient.from_config(self.settings) as client:
            if args.command == "bot":
                bot = await client.get_bot(args.id or client.bot_id)
                print(bot.model_dump_json(indent=2))

            elif args.command == "user":
                user = await client.get_user(args.id)
                print(user.model_dump_json(indent=2))

            elif args.command == "votes":
                bot_id = args.id or client.bot_id
                if args.ids_only:
                    print(json.dumps(await client.get_voter_ids(bot_id), indent=2))
                else:
                    voters = await client.get_votes(bot_id)
                    print(json.dumps([voter.model_dump() for voter in voters], indent=2))

            elif args.command == "check":
                voted = await client.has_voted(args.bot or client.bot_id, args.user)
                print(json.dumps({"voted": voted}))

            elif args.command == "stats":
                stats = await client.get_bot_stats(args.id or client.bot_id)
                print(stats.model_dump_json(indent=2))

            elif args.command == "post-stats":
                await client.post_bot_stats(
                    server_count=args.server_count,
                    shards=args.shards,
                    shard_id=args.shard_id,
                    shard_count=args.shard_count,
                )
                print(json.dumps({"posted": True}))

        return 0

    async def _execute_listen(self, args: argparse.Namespace) -> int:
        """Run the webhook listener and print every vote as one JSON line."""
        webhook = self.settings.webhook
        secret = args.secret or webhook.secret
        if not secret:
            raise ConfigurationError("A webhook secret is required (--secret or TOPGG_WEBHOOK__SECRET)")

        listener = WebhookListener(
            port=args.port if args.port is not None else webhook.port,
            secret=secret,
            host=args.host or webhook.host,
            path=args.path or webhook.path,
        )

        async with listener:
            async for vote in listener.events():
                print(vote.model_dump_json(), flush=True)

        return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )

    cli = TopggCLI()
    try:
        exit_code = asyncio.run(cli.run(argv))
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
