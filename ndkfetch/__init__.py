"""
ndkfetch - download, verify and install Android NDK releases.
"""
