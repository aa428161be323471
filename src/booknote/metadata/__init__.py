# ABOUTME: Metadata package: canonical Book record, provider protocol, and provider normalizers.
# ABOUTME: Exports the core types used throughout booknote.

from booknote.metadata.factory import create_provider
from booknote.metadata.http import MetadataFetchError
from booknote.metadata.provider import BookProvider, DetailProvider
from booknote.metadata.types import Book

__all__ = [
    "Book",
    "BookProvider",
    "DetailProvider",
    "MetadataFetchError",
    "create_provider",
]
