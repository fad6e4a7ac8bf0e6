"""
Android NDK release handling.

Registry of releases, archive extraction, NDK root location, installation
and the pipeline that ties them together.
"""

from .pipeline import NdkPipeline, PairResult, PairStatus, RunSummary
from .registry import PlatformEntry, Release, VersionRegistry, load_registry

__all__ = [
    "NdkPipeline",
    "PairResult",
    "PairStatus",
    "RunSummary",
    "PlatformEntry",
    "Release",
    "VersionRegistry",
    "load_registry",
]
