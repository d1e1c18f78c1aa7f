#!/usr/bin/env python3
"""
agixt-cli - Command-line interface for an AGiXT server.

This script wraps common AGiXT client calls (listing agents, chatting,
running chains, logging in) so they can be run from a shell. Connection
settings come from AGIXT_URI / AGIXT_API_KEY or a .env file, and can be
overridden with --server and --api-key.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable

from agixt_client import ERROR_MESSAGE, AGiXTClient, ClientConfig


class CommandError(Exception):
    """A command failed with a message already fit for the user."""


def print_error(message: str) -> None:
    """Print an error message with CLI prefix."""
    print(f"[agixt-cli] ERROR: {message}", file=sys.stderr)


def print_info(message: str) -> None:
    """Print an info message with CLI prefix."""
    print(f"[agixt-cli] {message}")


def print_result(result: Any) -> None:
    """Print a call result, pretty-printing JSON structures."""
    if isinstance(result, (dict, list)):
        print(json.dumps(result, indent=2))
    else:
        print(result)


def is_failure(result: Any) -> bool:
    """Check whether a client call returned the error sentinel."""
    if result == ERROR_MESSAGE:
        return True
    if isinstance(result, dict) and result.get("error") == ERROR_MESSAGE:
        return True
    if isinstance(result, list) and result and (
        result[0] == ERROR_MESSAGE or (isinstance(result[0], dict) and result[0].get("error") == ERROR_MESSAGE)
    ):
        return True
    return False


def build_client(args: argparse.Namespace) -> AGiXTClient:
    """Create a client from the environment, applying command-line overrides."""
    config = ClientConfig.from_env()
    if args.server:
        config.base_url = args.server
    if args.api_key:
        config.api_key = args.api_key
    return AGiXTClient.from_config(config)


def run_client(args: argparse.Namespace, call: Callable[[AGiXTClient], Awaitable[Any]]) -> int:
    """
    Open a client, run one call and print its result.

    Args:
        args: Parsed command-line arguments
        call: Coroutine function receiving the started client

    Returns:
        Exit code (0 on success, 1 if the call failed, 2 for an
        invalid server URL)
    """

    try:
        client = build_client(args)
    except ValueError as e:
        print_error(str(e))
        return 2

    async def runner() -> Any:
        async with client:
            return await call(client)

    try:
        result = asyncio.run(runner())
    except KeyboardInterrupt:
        print_info("\nOperation cancelled by user.")
        return 130
    except CommandError as e:
        print_error(str(e))
        return 1

    if result is None or is_failure(result):
        print_error("Request failed. Check the server URL and API key.")
        return 1
    print_result(result)
    return 0


def cmd_providers(args: argparse.Namespace) -> int:
    """List available providers."""
    return run_client(args, lambda client: client.get_providers())


def cmd_agents(args: argparse.Namespace) -> int:
    """List agents."""
    return run_client(args, lambda client: client.get_agents())


def cmd_conversations(args: argparse.Namespace) -> int:
    """List conversations, optionally for one agent."""
    return run_client(args, lambda client: client.get_conversations(args.agent or ""))


def cmd_chat(args: argparse.Namespace) -> int:
    """Chat with an agent given by name."""

    async def call(client: AGiXTClient) -> Any:
        agent_id = await client.get_agent_id_by_name(args.agent_name)
        if agent_id is None:
            raise CommandError(f"Agent '{args.agent_name}' not found.")
        return await client.chat(agent_id, args.message, args.conversation)

    return run_client(args, call)


def cmd_chain(args: argparse.Namespace) -> int:
    """Run a chain by name."""
    return run_client(
        args,
        lambda client: client.run_chain(
            chain_name=args.chain_name,
            user_input=args.user_input,
            agent_id=args.agent or "",
        ),
    )


def cmd_login(args: argparse.Namespace) -> int:
    """Log in and print the session token."""

    async def call(client: AGiXTClient) -> Any:
        response = await client.login(args.username, args.password, args.mfa_token)
        if not isinstance(response, dict) or "token" not in response:
            raise CommandError(f"Login failed: {response}")
        return response["token"]

    return run_client(args, call)


COMMANDS = {
    "providers": cmd_providers,
    "agents": cmd_agents,
    "conversations": cmd_conversations,
    "chat": cmd_chat,
    "chain": cmd_chain,
    "login": cmd_login,
}


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="agixt_cli.py",
        description="Command-line client for an AGiXT server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python agixt_cli.py agents                       List agents
  python agixt_cli.py chat AGiXT "Hello there"      Chat with the AGiXT agent
  python agixt_cli.py chain "Smart Chat" "Hi"      Run a chain by name
  python agixt_cli.py --server http://host:7437 providers
""",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging of requests"
    )
    parser.add_argument(
        "--server",
        help="AGiXT server URI (default: $AGIXT_URI or http://localhost:7437)"
    )
    parser.add_argument(
        "--api-key",
        dest="api_key",
        help="API key (default: $AGIXT_API_KEY)"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="Available commands",
        metavar="COMMAND",
        help="Command to execute"
    )

    subparsers.add_parser("providers", help="List available providers")
    subparsers.add_parser("agents", help="List agents")

    conversations_parser = subparsers.add_parser("conversations", help="List conversations")
    conversations_parser.add_argument(
        "--agent",
        help="Only list conversations of this agent ID"
    )

    chat_parser = subparsers.add_parser("chat", help="Chat with an agent")
    chat_parser.add_argument("agent_name", help="Name of the agent")
    chat_parser.add_argument("message", help="Message to send")
    chat_parser.add_argument(
        "--conversation",
        default="agixt-cli",
        help="Conversation name (default: agixt-cli)"
    )

    chain_parser = subparsers.add_parser("chain", help="Run a chain")
    chain_parser.add_argument("chain_name", help="Name of the chain")
    chain_parser.add_argument("user_input", help="Input passed to the chain")
    chain_parser.add_argument(
        "--agent",
        help="Agent ID overriding every step's agent"
    )

    login_parser = subparsers.add_parser("login", help="Log in and print the token")
    login_parser.add_argument("username", help="Username or email")
    login_parser.add_argument("password", help="Password")
    login_parser.add_argument(
        "--mfa-token",
        dest="mfa_token",
        help="TOTP code if MFA is enabled"
    )

    # Parse arguments
    try:
        args = parser.parse_args()
    except SystemExit as e:
        # argparse calls sys.exit on error, convert to return code
        return e.code if e.code is not None else 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    handler = COMMANDS.get(args.command)
    if handler is None:
        # No command specified
        parser.print_help()
        return 1
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
