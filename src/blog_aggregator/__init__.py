"""
Blog Aggregator - a small feed-aggregation backend.

Users register, create and follow feeds and read the posts of the feeds they
follow through a REST API, while a background scheduler keeps feed freshness
timestamps moving.
"""

__version__ = "0.1.0"
