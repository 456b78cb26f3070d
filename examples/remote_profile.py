#!/usr/bin/env python3
"""
Example: Reading a profile from a claim graph server

Reads the server address and credentials from CLAIMGRAPH_URL,
CLAIMGRAPH_API_KEY and CLAIMGRAPH_SESSION.

Usage:
    python examples/remote_profile.py "My User" "Internet Amigos Profile"
"""

import sys

from claimgraph import ClaimGraph, ClientConfig, ClaimGraphError, HttpGraphStore, reconstruct_profile


def main(user_name: str, predicate_name: str) -> int:
    store = HttpGraphStore(ClientConfig.from_env())
    if not store.start():
        print(f"Error: Could not connect to {store.base_url}")
        return 1
    try:
        graph = ClaimGraph(store)
        user = graph.identity_named(user_name)
        predicate = graph.identity_named(predicate_name)
        profile = reconstruct_profile(store, user, predicate)
    except ClaimGraphError as e:
        print(f"Error: {e}")
        return 1
    finally:
        store.stop()

    for field, value in profile.items():
        print(f"{field}: {value}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    sys.exit(main(sys.argv[1], sys.argv[2]))
