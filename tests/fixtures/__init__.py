"""Test fixtures for ndkfetch tests.

- ndk: fake NDK trees, NDK archives and small release registries

Import fixtures in your tests using:
    from tests.fixtures.ndk import ndk_tree, make_ndk_zip
"""

__all__ = ["ndk"]
