"""Tests for the command-line interface."""

import json

from click.testing import CliRunner

from image_inventory.cli import cli
from tests.fakes import make_image_archive


def _write_archive(tmp_path, layers):
    path = tmp_path / "image.tar"
    path.write_bytes(make_image_archive(layers))
    return path


def test_analyze_archive_prints_inventory(tmp_path) -> None:
    lock = {
        "lockfileVersion": 3,
        "packages": {"node_modules/left-pad": {"version": "1.3.0"}},
    }
    archive = _write_archive(
        tmp_path,
        [
            {
                "etc/os-release": b"ID=alpine\nVERSION_ID=3.19.1\n",
                "lib/apk/db/installed": (
                    b"P:musl\nV:1.2.4-r4\n\nP:busybox\nV:1.36.1-r15\n"
                ),
            },
            {"app/package-lock.json": json.dumps(lock).encode()},
        ],
    )

    result = CliRunner().invoke(
        cli, ["analyze", "--input", str(archive), "-l", "ERROR"]
    )

    assert result.exit_code == 0, result.output
    assert "alpine 3.19.1" in result.output
    assert "busybox" in result.output
    assert "left-pad" in result.output


def test_analyze_archive_with_unknown_os(tmp_path) -> None:
    archive = _write_archive(tmp_path, [{"etc/hostname": b"box"}])

    result = CliRunner().invoke(
        cli, ["analyze", "--input", str(archive), "-l", "ERROR"]
    )

    assert result.exit_code == 0, result.output
    assert "OS: unknown" in result.output
    assert "unknown package manager" in result.output


def test_analyze_invalid_archive_fails(tmp_path) -> None:
    path = tmp_path / "image.tar"
    path.write_bytes(b"not an archive" * 100)

    result = CliRunner().invoke(
        cli, ["analyze", "--input", str(path), "-l", "ERROR"]
    )

    assert result.exit_code == 1
    assert "failed to extract files" in result.output


def test_analyze_requires_exactly_one_source(tmp_path) -> None:
    result = CliRunner().invoke(cli, ["analyze"])

    assert result.exit_code == 2
    assert "exactly one of IMAGE or --input" in result.output


def test_invalid_config_is_reported(tmp_path) -> None:
    config = tmp_path / "settings.json"
    config.write_text(json.dumps({"log_level": "chatty"}))
    archive = _write_archive(tmp_path, [{"etc/os-release": b"ID=alpine\n"}])

    result = CliRunner().invoke(
        cli, ["analyze", "--input", str(archive), "--config", str(config)]
    )

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_list_analyzers() -> None:
    result = CliRunner().invoke(cli, ["analyzers"])

    assert result.exit_code == 0, result.output
    assert "OSReleaseAnalyzer" in result.output
    assert "ApkAnalyzer" in result.output
    assert "NpmLockAnalyzer" in result.output
