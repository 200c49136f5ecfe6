#!/usr/bin/env python3
"""
Tests for ZIP creation, extraction and listing
"""

import logging
import os
import zipfile

import pytest

from ignore_zipper.config import ZipperSettings
from ignore_zipper.errors import SourceError, ZipperError
from ignore_zipper.zipper import ExtractOptions, ZipOptions, Zipper, is_within_directory


@pytest.fixture
def project(tmp_path):
    """A small source tree with a .gitignore"""
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "main.py").write_text("print('main')\n")
    (root / "src" / "debug.log").write_text("log\n")
    (root / "dist").mkdir()
    (root / "dist" / "bundle.js").write_text("bundle\n")
    (root / "README.md").write_text("# project\n")
    (root / ".gitignore").write_text("*.log\ndist/\n")
    return root


def names(zip_path):
    with zipfile.ZipFile(zip_path) as archive:
        return sorted(archive.namelist())


def test_create_zip_applies_ignore_rules(project, tmp_path):
    """Test that ignored files never reach the archive"""
    output = tmp_path / "out" / "project.zip"

    summary = Zipper(project).create_zip(project, output)

    assert output.exists()
    assert names(output) == [".gitignore", "README.md", "src/main.py"]
    assert sorted(summary.entries) == names(output)
    assert summary.count == 3


def test_create_zip_with_extra_rule_sources(project, tmp_path):
    """Test ad-hoc patterns, explicit files and pattern-selected files"""
    (project / ".myignore").write_text("README.md\n")
    extra = tmp_path / "extra.ignore"
    extra.write_text("src/\n")
    output = tmp_path / "project.zip"

    options = ZipOptions(
        ignore_files=[extra],
        custom_patterns=["!dist/"],
        ignore_pattern=".my*",
        auto_ignore=False,
    )
    zipper = Zipper(project)
    zipper.create_zip(project, output, options)

    assert names(output) == [".gitignore", ".myignore", "dist/bundle.js"]
    assert zipper.rule_store.loaded_files == [".gitignore", ".myignore", "extra.ignore"]


def test_auto_discovered_ignore_files(project, tmp_path):
    """Test that .*ignore files in the root are picked up by default"""
    (project / ".packignore").write_text("README.md\n")
    output = tmp_path / "project.zip"

    Zipper(project).create_zip(project, output)

    assert "README.md" not in names(output)


def test_auto_discovery_disabled_by_settings(project, tmp_path):
    """Test the settings default for auto discovery"""
    (project / ".packignore").write_text("README.md\n")
    output = tmp_path / "project.zip"

    Zipper(project, ZipperSettings(auto_ignore=False)).create_zip(project, output)

    assert "README.md" in names(output)


def test_archive_inside_source_is_not_packed(project):
    """Test the output file is skipped when written inside the source"""
    output = project / "self.zip"

    zipper = Zipper(project)
    zipper.create_zip(project, output)

    assert "self.zip" not in names(output)
    # Re-archiving with the old archive present still skips it
    zipper.create_zip(project, output)
    assert "self.zip" not in names(output)


def test_repeated_create_does_not_duplicate_rules(project, tmp_path):
    """Test that each archive starts from a fresh rule set"""
    zipper = Zipper(project)

    zipper.create_zip(project, tmp_path / "first.zip")
    first_rules = zipper.rule_store.rules
    zipper.create_zip(project, tmp_path / "second.zip")

    assert zipper.rule_store.rules == first_rules
    assert len(zipper.rule_store) == 2
    assert zipper.rule_store.loaded_files == [".gitignore"]


def test_symlink_to_directory_is_skipped(tmp_path):
    """Test that a link to a directory never becomes an empty directory entry"""
    source = tmp_path / "src"
    (source / "d").mkdir(parents=True)
    (source / "d" / "f.txt").write_text("x")
    (source / "note.txt").write_text("note")
    try:
        os.symlink(source / "d", source / "link", target_is_directory=True)
        os.symlink(source / "note.txt", source / "note-link")
    except (OSError, NotImplementedError):
        pytest.skip("symbolic links not supported")

    output = tmp_path / "out.zip"
    summary = Zipper(source).create_zip(source, output)

    assert names(output) == ["d/f.txt", "note-link", "note.txt"]
    assert summary.skipped == ["link"]
    with zipfile.ZipFile(output) as archive:
        assert archive.read("note-link") == b"note"


def test_compression_levels(project, tmp_path):
    """Test stored and deflated archives"""
    stored = tmp_path / "stored.zip"
    Zipper(project).create_zip(project, stored, ZipOptions(compression_level=0))
    with zipfile.ZipFile(stored) as archive:
        assert {info.compress_type for info in archive.infolist()} == {zipfile.ZIP_STORED}

    deflated = tmp_path / "deflated.zip"
    Zipper(project).create_zip(project, deflated, ZipOptions(compression_level=9))
    with zipfile.ZipFile(deflated) as archive:
        assert {info.compress_type for info in archive.infolist()} == {zipfile.ZIP_DEFLATED}


def test_invalid_compression_level(project, tmp_path):
    """Test that out-of-range levels are rejected"""
    with pytest.raises(ZipperError):
        Zipper(project).create_zip(project, tmp_path / "x.zip", ZipOptions(compression_level=10))


def test_create_zip_source_errors(tmp_path):
    """Test missing and non-directory sources"""
    with pytest.raises(SourceError):
        Zipper(tmp_path).create_zip(tmp_path / "missing", tmp_path / "x.zip")

    a_file = tmp_path / "file.txt"
    a_file.write_text("x")
    with pytest.raises(SourceError) as exc_info:
        Zipper(tmp_path).create_zip(a_file, tmp_path / "x.zip")
    assert exc_info.value.path == a_file


def test_extract_round_trip(project, tmp_path):
    """Test extracting a created archive restores the kept files"""
    archive = tmp_path / "project.zip"
    Zipper(project).create_zip(project, archive)

    restored = tmp_path / "restored"
    summary = Zipper(restored).extract_zip(archive, restored)

    assert (restored / "src" / "main.py").read_text() == "print('main')\n"
    assert (restored / "README.md").read_text() == "# project\n"
    assert not (restored / "dist").exists()
    assert not (restored / "src" / "debug.log").exists()
    assert summary.skipped == []


def test_extract_rejects_path_traversal(tmp_path, caplog):
    """Test that members escaping the output root are skipped"""
    archive = tmp_path / "evil.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("../evil.txt", "evil")
        zf.writestr("nested/../../also-evil.txt", "evil")
        zf.writestr("safe/ok.txt", "ok")

    output = tmp_path / "out"
    caplog.set_level(logging.WARNING)
    summary = Zipper(output).extract_zip(archive, output)

    assert not (tmp_path / "evil.txt").exists()
    assert not (tmp_path / "also-evil.txt").exists()
    assert (output / "safe" / "ok.txt").read_text() == "ok"
    assert summary.entries == ["safe/ok.txt"]
    assert sorted(summary.skipped) == ["../evil.txt", "nested/../../also-evil.txt"]
    assert "dangerous" in caplog.text


def test_extract_skips_file_members_that_are_directories(tmp_path):
    """Test that a file member landing on a directory is skipped, not fatal"""
    archive = tmp_path / "odd.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("sub/..", "root")
        zf.writestr("taken", "file")
        zf.writestr("ok.txt", "ok")

    output = tmp_path / "out"
    (output / "taken").mkdir(parents=True)
    summary = Zipper(output).extract_zip(archive, output, ExtractOptions(overwrite=True))

    assert (output / "ok.txt").read_text() == "ok"
    assert (output / "taken").is_dir()
    assert summary.entries == ["ok.txt"]
    assert sorted(summary.skipped) == ["sub/..", "taken"]


def test_extract_directory_entries(tmp_path):
    """Test that directory members become directories"""
    archive = tmp_path / "dirs.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("empty/", "")

    output = tmp_path / "out"
    Zipper(output).extract_zip(archive, output)

    assert (output / "empty").is_dir()


def test_extract_respects_existing_files(tmp_path):
    """Test existing files are kept unless overwrite is requested"""
    archive = tmp_path / "a.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("a.txt", "new")

    output = tmp_path / "out"
    output.mkdir()
    (output / "a.txt").write_text("old")

    summary = Zipper(output).extract_zip(archive, output)
    assert (output / "a.txt").read_text() == "old"
    assert summary.skipped == ["a.txt"]

    summary = Zipper(output).extract_zip(archive, output, ExtractOptions(overwrite=True))
    assert (output / "a.txt").read_text() == "new"
    assert summary.entries == ["a.txt"]


def test_missing_and_corrupt_archives(tmp_path):
    """Test archive-level failures"""
    zipper = Zipper(tmp_path)

    with pytest.raises(ZipperError):
        zipper.extract_zip(tmp_path / "missing.zip", tmp_path / "out")
    with pytest.raises(ZipperError):
        zipper.list_zip_contents(tmp_path / "missing.zip")

    bogus = tmp_path / "bogus.zip"
    bogus.write_text("not a zip")
    with pytest.raises(ZipperError):
        zipper.extract_zip(bogus, tmp_path / "out")
    with pytest.raises(ZipperError):
        zipper.list_zip_contents(bogus)


def test_list_zip_contents(project, tmp_path):
    """Test listing returns member names"""
    archive = tmp_path / "project.zip"
    Zipper(project).create_zip(project, archive)

    assert sorted(Zipper(tmp_path).list_zip_contents(archive)) == [
        ".gitignore", "README.md", "src/main.py",
    ]


def test_is_within_directory(tmp_path):
    """Test the extraction boundary check"""
    assert is_within_directory(tmp_path, tmp_path / "a" / "b")
    assert is_within_directory(tmp_path, tmp_path)
    assert not is_within_directory(tmp_path / "out", tmp_path / "out" / ".." / "x")
    assert not is_within_directory(tmp_path / "out", tmp_path / "outside")
    assert not is_within_directory(tmp_path, tmp_path / "a" / "..", allow_root=False)
