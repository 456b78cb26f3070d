#!/usr/bin/env python3
"""
Example: Internet Amigos

Builds a tiny app on an in-process claim graph: two users join through a
membership predicate, write profiles with fields of their own choosing,
and the profiles are read back from claims alone.

Usage:
    python examples/internet_amigos.py
"""

import logging

from claimgraph import ClaimGraph, MemoryGraphStore
from claimgraph.demo import run_demo


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    graph = ClaimGraph(MemoryGraphStore())
    result = run_demo(graph)

    print()
    print("Internet Amigos members:")
    for member in result.members:
        print(f"  - {member.display_name}")
    print()
    for user, profile in result.profiles.items():
        print(f"{user}'s profile:")
        for field, value in profile.items():
            print(f"  {field}: {value}")
        print()


if __name__ == "__main__":
    main()
