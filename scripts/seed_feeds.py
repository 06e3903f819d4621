#!/usr/bin/env python3
"""
Seed the database with a demo user following a few sample feeds.

Prints the demo user's API key so the API can be tried right away.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from blog_aggregator.models import FeedCreate, FeedFollowCreate, UserCreate
from blog_aggregator.storage.database import DatabaseManager
from blog_aggregator.storage.repositories import (
    FeedFollowRepository,
    FeedRepository,
    UserRepository,
)


SAMPLE_FEEDS = [
    {"name": "Boot.dev Blog", "url": "https://blog.boot.dev/index.xml"},
    {"name": "Wag's Blog", "url": "https://wagslane.dev/index.xml"},
    {"name": "Hacker News", "url": "https://news.ycombinator.com/rss"},
    {"name": "Real Python", "url": "https://realpython.com/atom.xml"},
]


def main() -> None:
    """Seed the database with sample data."""
    import argparse

    parser = argparse.ArgumentParser(description="Seed database with a demo user and feeds")
    parser.add_argument("--name", default="demo", help="Name of the demo user")
    args = parser.parse_args()

    with DatabaseManager() as db_manager, db_manager.session() as session:
        user = UserRepository(session).create(UserCreate(name=args.name))
        feed_repo = FeedRepository(session)
        follow_repo = FeedFollowRepository(session)

        added = 0
        for feed_data in SAMPLE_FEEDS:
            if feed_repo.get_by_url(feed_data["url"]):
                print(f"Skipping existing feed: {feed_data['name']}")
                continue

            feed = feed_repo.create(FeedCreate(**feed_data), user_id=user.id)
            follow_repo.create(FeedFollowCreate(feed_id=feed.id), user_id=user.id)
            print(f"Added feed: {feed.name}")
            added += 1

        api_key = user.api_key

    print(f"\nSeeded {added} feeds for user '{args.name}'")
    print(f"API key: {api_key}")


if __name__ == "__main__":
    main()
