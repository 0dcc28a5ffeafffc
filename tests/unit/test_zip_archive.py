# Copyright 2024 The Bonita Application Packager Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Unit tests for zip archive extraction and creation.
"""
import os
import stat
import zipfile

import pytest
from bonita_packager.ARCHIVE.zip_reader import safe_extract
from bonita_packager.ARCHIVE.zip_writer import zip_directory
from bonita_packager.errors import ArchiveError


def _snapshot(root):
    """Relative path -> (is_dir, content, mode) for every entry under root."""
    result = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames:
            full = os.path.join(dirpath, name)
            rel = os.path.relpath(full, root)
            result[rel] = (True, None, stat.S_IMODE(os.stat(full).st_mode))
        for name in filenames:
            full = os.path.join(dirpath, name)
            rel = os.path.relpath(full, root)
            with open(full, "rb") as f:
                result[rel] = (False, f.read(), stat.S_IMODE(os.stat(full).st_mode))
    return result


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "tree"
    (root / "bin").mkdir(parents=True)
    (root / "conf" / "empty").mkdir(parents=True)
    (root / "bin" / "start.sh").write_text("#!/bin/sh\necho start\n")
    os.chmod(root / "bin" / "start.sh", 0o755)
    (root / "conf" / "app.properties").write_text("key=value\n")
    os.chmod(root / "conf" / "app.properties", 0o640)
    (root / "README.txt").write_bytes(b"\x00\x01binary\xff")
    os.chmod(root / "README.txt", 0o644)
    (root / "conf" / "secrets").mkdir()
    (root / "conf" / "secrets" / "token").write_text("s3cr3t\n")
    os.chmod(root / "conf" / "secrets" / "token", 0o600)
    os.chmod(root / "conf" / "secrets", 0o700)
    os.chmod(root / "conf", 0o750)
    return root


class TestZipDirectory:
    """Tests for zip_directory."""

    def test_round_trip_preserves_content_and_modes(self, tmp_path, tree):
        archive = tmp_path / "tree.zip"
        zip_directory(archive, tree, "bundle")

        root_name = safe_extract(archive, tmp_path / "out")

        assert root_name == "bundle"
        assert _snapshot(tmp_path / "out" / "bundle") == _snapshot(tree)

    def test_entries_live_under_base_in_zip(self, tmp_path, tree):
        archive = tmp_path / "tree.zip"
        zip_directory(archive, tree, "bundle")

        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
        assert all(name.startswith("bundle/") for name in names)
        assert "bundle/conf/empty/" in names

    def test_directory_written_before_its_content(self, tmp_path, tree):
        archive = tmp_path / "tree.zip"
        zip_directory(archive, tree, "bundle")

        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
        assert names.index("bundle/bin/") < names.index("bundle/bin/start.sh")
        assert names.index("bundle/conf/") < names.index("bundle/conf/app.properties")

    def test_entries_sorted_by_name(self, tmp_path, tree):
        archive = tmp_path / "tree.zip"
        zip_directory(archive, tree, "bundle")

        with zipfile.ZipFile(archive) as zf:
            top_level = [n for n in zf.namelist() if n.count("/") == 1 or (n.count("/") == 2 and n.endswith("/"))]
        assert top_level == ["bundle/README.txt", "bundle/bin/", "bundle/conf/"]

    def test_file_mode_stored_in_entry(self, tmp_path, tree):
        archive = tmp_path / "tree.zip"
        zip_directory(archive, tree, "bundle")

        with zipfile.ZipFile(archive) as zf:
            info = zf.getinfo("bundle/bin/start.sh")
        assert stat.S_IMODE(info.external_attr >> 16) == 0o755

    def test_symlinks_are_skipped(self, tmp_path, tree):
        os.symlink(tree / "README.txt", tree / "link.txt")
        os.symlink(tree / "bin", tree / "link-dir")
        os.symlink(tmp_path / "does-not-exist", tree / "dangling")
        archive = tmp_path / "tree.zip"

        zip_directory(archive, tree, "bundle")

        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
        assert "bundle/README.txt" in names
        assert not any("link" in name or "dangling" in name for name in names)

    def test_special_files_are_skipped(self, tmp_path, tree):
        os.mkfifo(tree / "pipe")
        archive = tmp_path / "tree.zip"

        zip_directory(archive, tree, "bundle")

        with zipfile.ZipFile(archive) as zf:
            assert "bundle/pipe" not in zf.namelist()

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(ArchiveError):
            zip_directory(tmp_path / "out.zip", tmp_path / "missing", "bundle")


class TestSafeExtract:
    """Tests for safe_extract."""

    def test_extracts_files_and_directories(self, tmp_path):
        archive = tmp_path / "a.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("root/", b"")
            zf.writestr("root/empty/", b"")
            zf.writestr("root/sub/file.txt", "hello")

        root_name = safe_extract(archive, tmp_path / "dest")

        assert root_name == "root"
        assert (tmp_path / "dest" / "root" / "empty").is_dir()
        assert (tmp_path / "dest" / "root" / "sub" / "file.txt").read_text() == "hello"

    def test_directory_modes_restored(self, tmp_path):
        archive = tmp_path / "a.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            private = zipfile.ZipInfo("root/private/")
            private.external_attr = (0o40700 << 16) | 0x10
            zf.writestr(private, b"")
            zf.writestr("root/private/key.txt", "secret")

        safe_extract(archive, tmp_path / "dest")

        private_dir = tmp_path / "dest" / "root" / "private"
        assert stat.S_IMODE(private_dir.stat().st_mode) == 0o700
        assert (private_dir / "key.txt").read_text() == "secret"

    def test_read_only_directory_receives_its_content(self, tmp_path):
        archive = tmp_path / "a.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            locked = zipfile.ZipInfo("root/locked/")
            locked.external_attr = (0o40555 << 16) | 0x10
            zf.writestr(locked, b"")
            zf.writestr("root/locked/inner/", b"")
            zf.writestr("root/locked/inner/file.txt", "hello")

        safe_extract(archive, tmp_path / "dest")

        locked_dir = tmp_path / "dest" / "root" / "locked"
        try:
            assert stat.S_IMODE(locked_dir.stat().st_mode) == 0o555
            assert (locked_dir / "inner" / "file.txt").read_text() == "hello"
        finally:
            os.chmod(locked_dir, 0o755)

    def test_file_without_permission_bits_restored(self, tmp_path):
        archive = tmp_path / "a.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            info = zipfile.ZipInfo("root/no-access.txt")
            info.external_attr = stat.S_IFREG << 16
            zf.writestr(info, "hidden")

        safe_extract(archive, tmp_path / "dest")

        target = tmp_path / "dest" / "root" / "no-access.txt"
        assert stat.S_IMODE(target.stat().st_mode) == 0
        assert target.stat().st_size == len("hidden")

    def test_entry_without_unix_mode_keeps_default_permissions(self, tmp_path):
        archive = tmp_path / "a.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr(zipfile.ZipInfo("root/plain.txt"), "plain")

        safe_extract(archive, tmp_path / "dest")

        target = tmp_path / "dest" / "root" / "plain.txt"
        assert target.read_text() == "plain"
        assert stat.S_IMODE(target.stat().st_mode) & 0o600 == 0o600

    def test_source_archive_is_kept(self, tmp_path):
        archive = tmp_path / "a.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("file.txt", "hello")

        safe_extract(archive, tmp_path / "dest")

        assert archive.exists()

    def test_empty_archive_has_no_root(self, tmp_path):
        archive = tmp_path / "empty.zip"
        with zipfile.ZipFile(archive, "w"):
            pass

        assert safe_extract(archive, tmp_path / "dest") is None

    def test_corrupt_archive_raises(self, tmp_path):
        archive = tmp_path / "broken.zip"
        archive.write_bytes(b"this is not a zip file")

        with pytest.raises(ArchiveError):
            safe_extract(archive, tmp_path / "dest")

    def test_missing_archive_raises(self, tmp_path):
        with pytest.raises(ArchiveError):
            safe_extract(tmp_path / "missing.zip", tmp_path / "dest")
