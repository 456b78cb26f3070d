#!/usr/bin/env python3
"""
claimgraph CLI - Command-line interface for a claim graph.

Usage:
    claimgraph demo                          # Internet Amigos walkthrough
    claimgraph identity NAME                 # Look up an identity by name
    claimgraph members PREDICATE OBJECT      # Subjects of PREDICATE --> OBJECT
    claimgraph profile USER --predicate NAME # Reconstruct a user's profile

Without --memory, commands talk to the server given by --server
(default: $CLAIMGRAPH_URL or http://localhost:8080). With --memory they
run against an in-process store holding the Internet Amigos walkthrough.
"""

import argparse
import logging
import sys

from .config import ClientConfig
from .demo import run_demo
from .errors import ClaimGraphError
from .filters import InClaim, Role, named
from .graph import ClaimGraph
from .http_store import HttpGraphStore
from .profile import reconstruct_profile
from .store import GraphStore, MemoryGraphStore


def _open_store(args: argparse.Namespace, seed: bool = True) -> GraphStore | None:
    """
    Return a ready store, or None when the server is unreachable.

    With --memory the store is seeded with the walkthrough unless
    ``seed`` is False, so lookups have something to find.
    """
    if args.memory:
        store = MemoryGraphStore()
        if seed:
            run_demo(ClaimGraph(store))
        return store
    config = ClientConfig.from_env()
    if args.server:
        config = ClientConfig(
            base_url=args.server,
            api_key=config.api_key,
            session=config.session,
            timeout=config.timeout,
        )
    store = HttpGraphStore(config)
    if not store.start():
        print(f"Error: Could not connect to claim graph server at {config.base_url}")
        return None
    return store


def _close_store(store: GraphStore) -> None:
    stop = getattr(store, "stop", None)
    if stop is not None:
        stop()


def cmd_demo(args: argparse.Namespace) -> int:
    """Run the Internet Amigos walkthrough.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    store = _open_store(args, seed=False)
    if store is None:
        return 1
    try:
        result = run_demo(ClaimGraph(store))
    except ClaimGraphError as e:
        print(f"Error: {e}")
        return 1
    finally:
        _close_store(store)

    print("Members:")
    for member in result.members:
        print(f"  {member.display_name} ({member.identity_id})")
    print()
    for user, profile in result.profiles.items():
        print(f"Profile of {user}:")
        for field, value in profile.items():
            print(f"  {field}: {value}")
        print()
    return 0


def cmd_identity(args: argparse.Namespace) -> int:
    """Show the identity with a given display name.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    store = _open_store(args)
    if store is None:
        return 1
    try:
        identity = ClaimGraph(store).find_identity(args.name)
    except ClaimGraphError as e:
        print(f"Error: {e}")
        return 1
    finally:
        _close_store(store)

    if identity is None:
        print(f"No identity named {args.name!r}")
        return 1
    print(f"Identity: {identity.identity_id}")
    print(f"  Name: {identity.display_name}")
    print(f"  Description: {identity.description}")
    return 0


def cmd_members(args: argparse.Namespace) -> int:
    """List identities that are subject of PREDICATE --> OBJECT claims.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    store = _open_store(args)
    if store is None:
        return 1
    try:
        members = store.query_identities(
            InClaim(Role.SUBJECT, where_predicate=named(args.predicate), where_object=named(args.object))
        )
    except ClaimGraphError as e:
        print(f"Error: {e}")
        return 1
    finally:
        _close_store(store)

    if not members:
        print("(none)")
    for member in members:
        print(f"{member.display_name} ({member.identity_id})")
    return 0


def cmd_profile(args: argparse.Namespace) -> int:
    """Reconstruct a user's profile.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    store = _open_store(args)
    if store is None:
        return 1
    try:
        graph = ClaimGraph(store)
        user = graph.identity_named(args.user)
        predicate = graph.identity_named(args.predicate)
        profile = reconstruct_profile(store, user, predicate)
    except ClaimGraphError as e:
        print(f"Error: {e}")
        return 1
    finally:
        _close_store(store)

    print(f"Profile of {args.user}:")
    for field, value in profile.items():
        print(f"  {field}: {value}")
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="claimgraph",
        description="Query and build identity/claim graphs"
    )
    parser.add_argument(
        "--server",
        default=None,
        help="Claim graph server URL (default: $CLAIMGRAPH_URL or http://localhost:8080)"
    )
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Use an in-process store seeded with the walkthrough instead of a server"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log each graph operation"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Run the Internet Amigos walkthrough")
    demo_parser.set_defaults(func=cmd_demo)

    # Identity command
    identity_parser = subparsers.add_parser("identity", help="Look up an identity by display name")
    identity_parser.add_argument("name", help="Display name")
    identity_parser.set_defaults(func=cmd_identity)

    # Members command
    members_parser = subparsers.add_parser("members", help="List subjects of PREDICATE --> OBJECT claims")
    members_parser.add_argument("predicate", help="Predicate display name")
    members_parser.add_argument("object", help="Object display name")
    members_parser.set_defaults(func=cmd_members)

    # Profile command
    profile_parser = subparsers.add_parser("profile", help="Reconstruct a user's profile")
    profile_parser.add_argument("user", help="User display name")
    profile_parser.add_argument("--predicate", required=True, help="Profile predicate display name")
    profile_parser.set_defaults(func=cmd_profile)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 2

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
