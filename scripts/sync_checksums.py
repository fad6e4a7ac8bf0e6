"""
Recompute the digests recorded in ndkfetch/data/releases.json.

Each archive is downloaded (or reused from the cache directory) and hashed
with the algorithm matching the length of the digest already on record;
entries with an unrecognized digest length are rehashed with SHA-1.

Usage:
    python scripts/sync_checksums.py --check
    python scripts/sync_checksums.py --version 27 --version 28
"""

import argparse
import json
import sys
from pathlib import Path

from ndkfetch.core.download import DownloadError, download_file, filename_from_url
from ndkfetch.core.verification import algorithm_for_digest, compute_file_hash

REGISTRY = Path(__file__).resolve().parent.parent / "ndkfetch" / "data" / "releases.json"
FALLBACK_ALGORITHM = "sha1"


def format_registry(data) -> str:
    """Serialize registry data with one platform entry per line."""
    lines = ["{"]
    for key, value in data.items():
        if key != "releases":
            lines.append(f"  {json.dumps(key)}: {json.dumps(value)},")
    lines.append('  "releases": {')
    releases = list(data["releases"].items())
    for i, (number, release) in enumerate(releases):
        lines.append(f"    {json.dumps(number)}: {{")
        lines.append(f'      "name": {json.dumps(release["name"])},')
        lines.append('      "platforms": {')
        platforms = list(release["platforms"].items())
        for j, (tag, entry) in enumerate(platforms):
            comma = "," if j < len(platforms) - 1 else ""
            lines.append(f"        {json.dumps(tag)}: {json.dumps(entry)}{comma}")
        lines.append("      }")
        lines.append("    }," if i < len(releases) - 1 else "    }")
    lines.append("  }")
    lines.append("}")
    return "\n".join(lines) + "\n"


def sync(registry_path: Path, cache_dir: Path, versions, check_only: bool) -> int:
    with open(registry_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    cache_dir.mkdir(parents=True, exist_ok=True)
    changed = 0
    failed = 0

    for number, release in data["releases"].items():
        if versions and int(number) not in versions:
            continue
        for tag, entry in release["platforms"].items():
            url = entry["url"]
            algorithm = algorithm_for_digest(entry["digest"]) or FALLBACK_ALGORITHM
            archive = cache_dir / filename_from_url(url)
            print(f"r{number}/{tag}: {archive.name}")

            if not archive.exists():
                try:
                    download_file(url, archive)
                except DownloadError as e:
                    print(f"  -> Failed to download: {e}")
                    failed += 1
                    continue

            actual = compute_file_hash(archive, algorithm)
            if actual == entry["digest"].lower():
                continue

            print(f"  -> {algorithm}: {entry['digest']} -> {actual}")
            entry["digest"] = actual
            changed += 1

    if changed and not check_only:
        with open(registry_path, "w", encoding="utf-8") as f:
            f.write(format_registry(data))

    print(f"\n{changed} digest(s) differ, {failed} download(s) failed")
    if check_only and changed:
        return 1
    return 1 if failed else 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--registry", type=Path, default=REGISTRY)
    parser.add_argument("--cache-dir", type=Path, default=Path("tmp_downloads"))
    parser.add_argument(
        "--version",
        dest="versions",
        type=int,
        action="append",
        help="Only process this release number (repeatable)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report differing digests without rewriting the registry",
    )
    args = parser.parse_args()
    return sync(args.registry, args.cache_dir, set(args.versions or ()), args.check)


if __name__ == "__main__":
    sys.exit(main())
