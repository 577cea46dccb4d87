#!/usr/bin/env python3
"""
Quick Start - Keep a player's stats in a stashed column.

Usage:
    python examples/quick_start.py
"""

from stashed import connect


def main():
    db = connect("sqlite:///:memory:")

    # Every player record gets its own "stats" document
    db.stash("/players/*", "stats")
    db.create("/players/casey", {"team": "Mudville"})

    stats = db.stash_for("/players/casey", "stats")
    stats.set("sports/baseball/stats/RBIs", 4)
    print(f"RBIs after the hit: {stats.increment('sports/baseball/stats/RBIs')}")
    print(f"Baseball: {stats.get('sports/baseball')}")

    removed = stats.delete("sports/baseball/stats/RBIs")
    print(f"Removed {removed}, stash is now {stats.document()}")

    record = db.read("/players/casey")
    print(f"Record version: {record.version}")

    db.close()


if __name__ == "__main__":
    main()
