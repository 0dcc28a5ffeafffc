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
Extraction of untrusted zip archives.
"""

import logging
import os
import shutil
import stat
import zipfile
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..errors import ArchiveError, PathTraversalError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _resolve_members(
    archive: zipfile.ZipFile, root: Path
) -> List[Tuple[zipfile.ZipInfo, Path]]:
    """
    Map every entry of the archive to its destination path.

    Raises PathTraversalError on the first entry that would land outside of
    ``root``; nothing has been written at that point.
    """
    prefix = str(root) + os.sep
    members = []
    for info in archive.infolist():
        target = (root / info.filename).resolve()
        inside = str(target).startswith(prefix)
        if info.is_dir() and target == root:
            inside = True
        if not inside:
            raise PathTraversalError(info.filename, str(root))
        members.append((info, target))
    return members


def _unix_mode(info: zipfile.ZipInfo) -> Optional[int]:
    """Permission bits stored in the entry, None when the archive has no Unix mode."""
    st_mode = info.external_attr >> 16
    if not st_mode:
        return None
    return stat.S_IMODE(st_mode)


def _top_level_name(archive: zipfile.ZipFile) -> Optional[str]:
    for name in archive.namelist():
        head = name.replace("\\", "/").lstrip("/").split("/", 1)[0]
        if head:
            return head
    return None


def safe_extract(source: PathLike, destination: PathLike) -> Optional[str]:
    """
    Extracts a zip archive into ``destination``.

    Every entry is checked before anything is written: a single entry
    resolving outside of the destination aborts the whole extraction.
    Permission bits stored in the archive are applied to extracted files
    and directories.
    The source archive is left in place.

    Args:
        source: Path of the zip archive.
        destination: Directory to extract into, created when missing.

    Returns:
        Name of the top-level directory of the archive, None if it is empty.
    """
    logger.debug("Extracting %s into %s", source, destination)
    try:
        os.makedirs(destination, exist_ok=True)
        root = Path(destination).resolve()
        with zipfile.ZipFile(source) as archive:
            members = _resolve_members(archive, root)
            dir_modes = []
            for info, target in members:
                mode = _unix_mode(info)
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    if mode is not None:
                        dir_modes.append((target, mode))
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                if mode is not None:
                    os.chmod(target, mode)
            # Deepest first, once every file is written, so read-only directories can be filled
            for target, mode in sorted(dir_modes, key=lambda item: len(item[0].parts), reverse=True):
                os.chmod(target, mode)
            return _top_level_name(archive)
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        raise ArchiveError(f"Cannot read archive {source}: {exc}") from exc
    except OSError as exc:
        raise ArchiveError(f"Failed to extract {source}: {exc}") from exc
