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
Creation of zip archives from a directory tree.
"""

import logging
import os
import shutil
import zipfile
from pathlib import Path
from typing import Union

from ..errors import ArchiveError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def zip_directory(zip_filename: PathLike, base_dir: PathLike, base_in_zip: str) -> None:
    """
    Writes the content of ``base_dir`` into a new zip file.

    Entries are stored under ``base_in_zip/`` and keep the permission bits of
    the files they come from. Each directory gets an explicit entry ending
    with '/' written before its content, so empty directories survive.
    Symlinks and special files are left out.

    Args:
        zip_filename: Path of the archive to create.
        base_dir: Directory to archive.
        base_in_zip: Name of the top-level directory inside the archive.

    Raises:
        ArchiveError: when reading the tree or writing the archive fails. The
            partially written archive must then be discarded.
    """
    logger.debug("Archiving %s into %s", base_dir, zip_filename)
    try:
        with zipfile.ZipFile(zip_filename, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            _add_files(archive, str(base_dir), base_in_zip.strip("/"))
    except (OSError, zipfile.LargeZipFile) as exc:
        raise ArchiveError(f"Failed to create archive {zip_filename}: {exc}") from exc


def _add_files(archive: zipfile.ZipFile, base_path: str, base_in_zip: str) -> None:
    with os.scandir(base_path) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        arcname = f"{base_in_zip}/{entry.name}" if base_in_zip else entry.name
        try:
            if entry.is_symlink():
                continue
            if entry.is_dir(follow_symlinks=False):
                logger.debug("Creating zip dir %s", arcname)
                info = zipfile.ZipInfo.from_file(entry.path, arcname, strict_timestamps=False)
                archive.writestr(info, b"")
                _add_files(archive, entry.path, arcname)
            elif entry.is_file(follow_symlinks=False):
                _add_file(archive, entry.path, arcname)
            # sockets, fifos and devices are not archived
        except FileNotFoundError:
            # listed but gone before it could be read
            logger.debug("Skipping vanished entry %s", entry.path)


def _add_file(archive: zipfile.ZipFile, path: str, arcname: str) -> None:
    info = zipfile.ZipInfo.from_file(path, arcname, strict_timestamps=False)
    info.compress_type = zipfile.ZIP_DEFLATED
    with open(path, "rb") as src, archive.open(info, "w") as dst:
        shutil.copyfileobj(src, dst, 1024 * 8)
