"""
Persistence adapters for the execution log.
"""

from lazi.infrastructure.persistence.counter import FileIdAllocator, InMemoryIdAllocator
from lazi.infrastructure.persistence.text_log import FilesystemLogStore, InMemoryLogStore

__all__ = [
    "FileIdAllocator",
    "InMemoryIdAllocator",
    "FilesystemLogStore",
    "InMemoryLogStore",
]
