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
Assembly of the Docker build context sent to the daemon.
"""
import logging
import os
import shutil
import tempfile
from importlib import resources
from pathlib import Path
from typing import IO, Optional

from docker.utils import tar

from ..MODELS.package_config import PackageConfig
from ..errors import ArchiveError

logger = logging.getLogger(__name__)

DOCKERFILE_NAME = "Dockerfile"
RESOURCES_DIR = "resources"


def embedded_dockerfile() -> bytes:
    """The Dockerfile shipped with the package, byte for byte."""
    return resources.files(__package__).joinpath(RESOURCES_DIR).joinpath(DOCKERFILE_NAME).read_bytes()


class BuildContext:
    """
    Temporary directory holding everything the embedded Dockerfile needs:

        Dockerfile
        resources/<application>
        resources/<configuration file>   (optional)

    Use it as a context manager; the directory is removed on exit, whether the
    build succeeded or not.
    """
    def __init__(self, config: PackageConfig):
        self.config = config
        self.path: Optional[Path] = None
        self._stream: Optional[IO[bytes]] = None

    def __enter__(self) -> "BuildContext":
        self.path = Path(tempfile.mkdtemp(prefix="docker-context"))
        try:
            self._populate()
        except BaseException:
            self.cleanup()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()

    def _populate(self):
        resources_dir = self.path / RESOURCES_DIR
        resources_dir.mkdir()
        try:
            self._copy(self.config.application_path, resources_dir)
            if self.config.configuration_file:
                self._copy(self.config.configuration_file, resources_dir)
            (self.path / DOCKERFILE_NAME).write_bytes(embedded_dockerfile())
        except OSError as exc:
            raise ArchiveError(f"Failed to prepare Docker build context: {exc}") from exc
        logger.debug("Docker build context prepared in %s", self.path)

    @staticmethod
    def _copy(source: Path, resources_dir: Path):
        target = resources_dir / os.path.basename(os.path.normpath(source))
        if os.path.isdir(source):
            shutil.copytree(source, target)
        else:
            shutil.copy2(source, target)

    def tar_stream(self) -> IO[bytes]:
        """
        Archives the context directory for the daemon build endpoint.

        :return: A seekable tar file object positioned at its start.
        """
        if self.path is None:
            raise RuntimeError("Build context is not prepared, use it as a context manager")
        if self._stream is None:
            # docker.utils.tar walks an absolute root
            root = os.path.abspath(self.path)
            try:
                self._stream = tar(root)
            except OSError as exc:
                raise ArchiveError(f"Failed to archive Docker build context: {exc}") from exc
        return self._stream

    def cleanup(self):
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        if self.path is not None and self.path.exists():
            shutil.rmtree(self.path, ignore_errors=True)
        self.path = None
