"""
Document store access.

The statistics rollups live in MongoDB. The client is created lazily and
cached per process; pymongo only connects on first use, so an unreachable
server surfaces as an error on the first query rather than at import time.
"""

from functools import lru_cache

from pymongo import MongoClient
from pymongo.collection import Collection

from catering.config import get_settings


@lru_cache()
def get_mongo_client() -> MongoClient:
    settings = get_settings()
    return MongoClient(settings.mongo_url, serverSelectionTimeoutMS=settings.mongo_timeout_ms)


def get_stats_collection() -> Collection:
    settings = get_settings()
    return get_mongo_client()[settings.mongo_database][settings.mongo_stats_collection]
