"""Skeleton application bootstrap: revision lookup, cache and extraction."""

from zfscaffold.skeleton.bootstrap import BootstrapResult, BootstrapState, SkeletonBootstrap
from zfscaffold.skeleton.cache import SkeletonArchive, SkeletonCache
from zfscaffold.skeleton.client import SkeletonClient

__all__ = [
    "BootstrapResult",
    "BootstrapState",
    "SkeletonArchive",
    "SkeletonBootstrap",
    "SkeletonCache",
    "SkeletonClient",
]
