"""
Tests for the NDK installation pipeline.

Network access is mocked with responses and archives are small zip files
shaped like real NDK releases.
"""

import hashlib
import zipfile
from unittest.mock import Mock, patch

import pytest
import responses

from ndkfetch.config import RunConfig
from ndkfetch.core.exceptions import ToolUnavailableError
from ndkfetch.core.verification import compute_file_hash
from ndkfetch.ndk.archivers import ArchiverLocator
from ndkfetch.ndk.extractor import ArchiveExtractor
from ndkfetch.ndk.installer import is_installed
from ndkfetch.ndk.pipeline import NdkPipeline, PairStatus, RunSummary, PairResult
from ndkfetch.ndk.registry import PlatformEntry
from tests.fixtures.ndk import make_ndk_zip, make_registry, sha1_of

BASE_URL = "https://dl.google.com/android/repository"
WIN_URL = f"{BASE_URL}/android-ndk-r28c-windows.zip"
LINUX_URL = f"{BASE_URL}/android-ndk-r28c-linux.zip"
MAC_URL = f"{BASE_URL}/android-ndk-r28c-darwin.zip"
DMG_URL = f"{BASE_URL}/android-ndk-r28c-darwin.dmg"


@pytest.fixture
def config(tmp_path, ndk_home):
    return RunConfig(
        install_root=tmp_path / "ndk", download_dir=tmp_path / "downloads"
    )


@pytest.fixture
def ndk_bytes(tmp_path):
    return make_ndk_zip(tmp_path / "src" / "ndk.zip").read_bytes()


@pytest.fixture
def ndk_sha1(ndk_bytes):
    return hashlib.sha1(ndk_bytes).hexdigest()


def _no_archiver():
    locator = Mock(spec=ArchiverLocator)
    locator.find.return_value = None
    return locator


def _pipeline(registry, config, **kwargs):
    kwargs.setdefault("extractor", ArchiveExtractor(_no_archiver()))
    return NdkPipeline(registry, config, **kwargs)


class TestInstall:
    """End-to-end installs through the zip path."""

    @responses.activate
    def test_install_win64_r28(self, config, ndk_bytes, ndk_sha1):
        """Version 28 on Win64: download, SHA-1 check, zip extract, install."""
        responses.add(responses.GET, WIN_URL, body=ndk_bytes, status=200)
        registry = make_registry({28: {"Win64": PlatformEntry(WIN_URL, ndk_sha1)}})

        summary = _pipeline(registry, config).run([28], ["Win64"])

        result = summary.results[0]
        dest = config.install_root / "Win64" / "28"
        assert result.status is PairStatus.INSTALLED
        assert result.path == dest
        assert is_installed(dest)
        assert (dest / "build" / "ndk-build").exists()
        assert summary.exit_code == 0

    @responses.activate
    def test_archive_and_staging_removed(self, config, ndk_bytes, ndk_sha1):
        responses.add(responses.GET, LINUX_URL, body=ndk_bytes, status=200)
        registry = make_registry({28: {"Linux64": PlatformEntry(LINUX_URL, ndk_sha1)}})

        _pipeline(registry, config).run([28], ["Linux64"])

        assert not (config.download_dir / "android-ndk-r28c-linux.zip").exists()
        assert not (config.download_dir / "staging" / "Linux64-28").exists()

    @responses.activate
    def test_keep_archives(self, config, ndk_bytes, ndk_sha1):
        config.keep_archives = True
        responses.add(responses.GET, LINUX_URL, body=ndk_bytes, status=200)
        registry = make_registry({28: {"Linux64": PlatformEntry(LINUX_URL, ndk_sha1)}})

        _pipeline(registry, config).run([28], ["Linux64"])

        assert (config.download_dir / "android-ndk-r28c-linux.zip").exists()

    def test_existing_archive_is_kept(self, config, ndk_bytes, ndk_sha1, no_network):
        """An archive this run did not download is never deleted."""
        archive = config.download_dir / "android-ndk-r28c-linux.zip"
        archive.parent.mkdir(parents=True)
        archive.write_bytes(ndk_bytes)
        registry = make_registry({28: {"Linux64": PlatformEntry(LINUX_URL, ndk_sha1)}})

        summary = _pipeline(registry, config).run([28], ["Linux64"])

        assert summary.results[0].status is PairStatus.INSTALLED
        assert archive.exists()

    @responses.activate
    def test_skip_extract(self, config, ndk_bytes, ndk_sha1):
        config.skip_extract = True
        responses.add(responses.GET, LINUX_URL, body=ndk_bytes, status=200)
        registry = make_registry({28: {"Linux64": PlatformEntry(LINUX_URL, ndk_sha1)}})

        summary = _pipeline(registry, config).run([28], ["Linux64"])

        archive = config.download_dir / "android-ndk-r28c-linux.zip"
        assert summary.results[0].status is PairStatus.DOWNLOADED
        assert summary.results[0].path == archive
        assert archive.exists()
        assert not (config.install_root / "Linux64" / "28").exists()
        assert summary.exit_code == 0

    @responses.activate
    def test_partial_installation_is_replaced(self, config, ndk_bytes, ndk_sha1):
        dest = config.install_root / "Linux64" / "28"
        (dest / "toolchains").mkdir(parents=True)
        (dest / "stale.txt").write_text("left over")
        responses.add(responses.GET, LINUX_URL, body=ndk_bytes, status=200)
        registry = make_registry({28: {"Linux64": PlatformEntry(LINUX_URL, ndk_sha1)}})

        summary = _pipeline(registry, config).run([28], ["Linux64"])

        assert summary.results[0].status is PairStatus.INSTALLED
        assert not (dest / "stale.txt").exists()
        assert is_installed(dest)


class TestIdempotence:
    @responses.activate
    def test_second_run_does_no_work(self, config, ndk_bytes, ndk_sha1):
        """A valid installation short-circuits download and extraction."""
        responses.add(responses.GET, LINUX_URL, body=ndk_bytes, status=200)
        registry = make_registry({28: {"Linux64": PlatformEntry(LINUX_URL, ndk_sha1)}})

        first = _pipeline(registry, config).run([28], ["Linux64"])
        extractor = Mock(spec=ArchiveExtractor)
        second = _pipeline(registry, config, extractor=extractor).run([28], ["Linux64"])

        assert first.results[0].status is PairStatus.INSTALLED
        assert second.results[0].status is PairStatus.ALREADY_INSTALLED
        assert len(responses.calls) == 1
        extractor.extract.assert_not_called()
        assert second.exit_code == 0


class TestConfigurationMiss:
    @responses.activate
    def test_unknown_version_is_skipped(self, config, caplog):
        """Version 99: warning, no network access, non-zero exit."""
        registry = make_registry({28: {"Win64": PlatformEntry(WIN_URL, "0" * 40)}})

        summary = _pipeline(registry, config).run([99], ["Win64"])

        result = summary.results[0]
        assert result.status is PairStatus.SKIPPED
        assert "r99" in result.message
        assert len(responses.calls) == 0
        assert summary.exit_code == 1
        assert "r99/Win64" in caplog.text

    def test_unsupported_platform_is_skipped(self, config):
        registry = make_registry({28: {"Win64": PlatformEntry(WIN_URL, "0" * 40)}})

        summary = _pipeline(registry, config).run([28], ["Win32"])

        assert summary.results[0].status is PairStatus.SKIPPED

    def test_missing_filename_is_skipped(self, config):
        registry = make_registry(
            {28: {"Win64": PlatformEntry(f"{BASE_URL}/", "0" * 40)}}
        )

        summary = _pipeline(registry, config).run([28], ["Win64"])

        assert summary.results[0].status is PairStatus.SKIPPED
        assert "file name" in summary.results[0].message


class TestIntegrityFailure:
    @responses.activate
    def test_mismatch_never_installs(self, config, ndk_bytes):
        """Wrong digest: download happens, nothing is extracted or installed."""
        responses.add(responses.GET, WIN_URL, body=ndk_bytes, status=200)
        registry = make_registry({28: {"Win64": PlatformEntry(WIN_URL, "0" * 40)}})
        extractor = Mock(spec=ArchiveExtractor)

        summary = _pipeline(registry, config, extractor=extractor).run([28], ["Win64"])

        assert summary.results[0].status is PairStatus.FAILED
        assert "Checksum mismatch" in summary.results[0].message
        assert len(responses.calls) == 1
        extractor.extract.assert_not_called()
        assert not is_installed(config.install_root / "Win64" / "28")
        assert not (config.download_dir / "android-ndk-r28c-windows.zip").exists()
        assert summary.exit_code == 1

    @responses.activate
    def test_unrecognized_digest_length_installs(self, config, ndk_bytes):
        responses.add(responses.GET, WIN_URL, body=ndk_bytes, status=200)
        registry = make_registry({28: {"Win64": PlatformEntry(WIN_URL, "ab" * 49)}})

        summary = _pipeline(registry, config).run([28], ["Win64"])

        assert summary.results[0].status is PairStatus.INSTALLED


class TestSharedArchive:
    @responses.activate
    def test_two_tags_one_download(self, config, ndk_bytes, ndk_sha1):
        """Mac64 and MacArm64 share one archive: fetched and verified once."""
        responses.add(responses.GET, MAC_URL, body=ndk_bytes, status=200)
        entry = PlatformEntry(MAC_URL, ndk_sha1)
        registry = make_registry({28: {"Mac64": entry, "MacArm64": entry}})

        with patch(
            "ndkfetch.core.verification.compute_file_hash", wraps=compute_file_hash
        ) as mock_hash:
            summary = _pipeline(registry, config).run([28], ["Mac64", "MacArm64"])

        assert [r.status for r in summary.results] == [PairStatus.INSTALLED] * 2
        assert len(responses.calls) == 1
        assert mock_hash.call_count == 1
        assert is_installed(config.install_root / "Mac64" / "28")
        assert is_installed(config.install_root / "MacArm64" / "28")
        assert not (config.download_dir / "android-ndk-r28c-darwin.zip").exists()


class TestPairFailures:
    @responses.activate
    @patch("ndkfetch.core.download.time.sleep")
    def test_transport_failure_continues(self, mock_sleep, config, ndk_bytes, ndk_sha1):
        """A failed download aborts only its own pair."""
        responses.add(responses.GET, WIN_URL, status=500)
        responses.add(responses.GET, LINUX_URL, body=ndk_bytes, status=200)
        registry = make_registry(
            {
                28: {
                    "Win64": PlatformEntry(WIN_URL, ndk_sha1),
                    "Linux64": PlatformEntry(LINUX_URL, ndk_sha1),
                }
            }
        )

        summary = _pipeline(registry, config).run([28], ["Win64", "Linux64"])

        assert [r.status for r in summary.results] == [
            PairStatus.FAILED,
            PairStatus.INSTALLED,
        ]
        assert summary.exit_code == 1

    @responses.activate
    def test_root_not_found(self, config, tmp_path):
        archive = tmp_path / "src" / "not-ndk.zip"
        archive.parent.mkdir(parents=True)
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("docs/README", "not an NDK")
        responses.add(responses.GET, LINUX_URL, body=archive.read_bytes(), status=200)
        registry = make_registry(
            {28: {"Linux64": PlatformEntry(LINUX_URL, sha1_of(archive))}}
        )

        summary = _pipeline(registry, config).run([28], ["Linux64"])

        assert summary.results[0].status is PairStatus.FAILED
        assert "No NDK root" in summary.results[0].message
        assert not (config.download_dir / "staging" / "Linux64-28").exists()


class TestToolUnavailable:
    @responses.activate
    def test_missing_archiver_stops_run(self, config):
        """A disk image without 7-Zip ends the run; cleanup still happens."""
        responses.add(responses.GET, DMG_URL, body=b"dmg", status=200)
        digest = hashlib.sha1(b"dmg").hexdigest()
        registry = make_registry(
            {
                27: {"Mac64": PlatformEntry(DMG_URL, digest)},
                28: {"Mac64": PlatformEntry(DMG_URL, digest)},
            }
        )
        pipeline = _pipeline(registry, config)

        with patch.object(pipeline, "process_pair", wraps=pipeline.process_pair) as spy:
            with pytest.raises(ToolUnavailableError):
                pipeline.run([27, 28], ["Mac64"])

        assert spy.call_count == 1
        assert not (config.download_dir / "android-ndk-r28c-darwin.dmg").exists()


class TestDefaults:
    @responses.activate
    def test_latest_release_by_default(self, config, ndk_bytes, ndk_sha1):
        responses.add(responses.GET, LINUX_URL, body=ndk_bytes, status=200)
        registry = make_registry(
            {
                27: {"Linux64": PlatformEntry(f"{BASE_URL}/old.zip", "0" * 40)},
                28: {"Linux64": PlatformEntry(LINUX_URL, ndk_sha1)},
            }
        )
        config.platform = "Linux64"

        summary = _pipeline(registry, config).run()

        assert [(r.version, r.platform) for r in summary.results] == [(28, "Linux64")]


class TestRunSummary:
    def test_exit_codes(self):
        ok = PairResult(28, "Win64", PairStatus.INSTALLED)
        skipped = PairResult(99, "Win64", PairStatus.SKIPPED)
        assert RunSummary([ok]).exit_code == 0
        assert RunSummary([ok, skipped]).exit_code == 1
        assert RunSummary([ok, skipped]).count(PairStatus.SKIPPED) == 1
        assert ok.label == "r28/Win64"
