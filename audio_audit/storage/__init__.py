"""
Storage module for probing object existence.

This module provides the abstract storage interface and concrete backends for
S3-compatible cloud buckets and local directory trees.
"""

from .base import BaseStorage
from .cloud import CloudStorage
from .local import LocalStorage

__all__ = [
    "BaseStorage",
    "CloudStorage",
    "LocalStorage",
]
