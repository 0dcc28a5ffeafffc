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
Packaging of a custom application inside a Bonita Tomcat bundle.
"""
import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from ..ARCHIVE.zip_reader import safe_extract
from ..ARCHIVE.zip_writer import zip_directory
from ..MODELS.package_config import TomcatPackageConfig
from ..errors import ArchiveError, PackagingError
from .bundle_locator import locate_bundle

logger = logging.getLogger(__name__)

WEBAPPS_DIR = Path("server", "webapps")
WAR_NAME = "bonita.war"
WEBAPP_NAME = "bonita"
CUSTOM_APPLICATION_DIR = Path("WEB-INF", "classes", "my-application")


class TomcatPackager:
    """
    Rebuilds a Bonita Tomcat bundle with the custom application inside the
    Bonita web application, so that it is installed at Tomcat startup.
    """
    def __init__(self, config: TomcatPackageConfig):
        """
        Initializes the packager.

        :param config: Validated packaging settings.
        """
        self.config = config
        self.output_dir = config.output_dir

    def package(self) -> Optional[Path]:
        """
        Runs the whole pipeline.

        :return: Path of the re-packaged bundle, or None when no bundle could
            be found (nothing is touched in that case).
        """
        bundle = locate_bundle(self.config.bundle_file, self.config.work_dir)
        if bundle is None:
            return None

        self._clean_output()

        logger.info("Generating your Custom Application Bonita Tomcat bundle...")
        bundle_name = bundle.name[: -len(bundle.suffix)]
        logger.info("Unpacking Bonita Tomcat bundle %s", bundle.name)
        root_name = safe_extract(bundle, self.output_dir)
        if not root_name:
            raise PackagingError(f"No root folder found inside file {bundle}")

        bundle_root = self.output_dir / root_name
        try:
            self._unpack_war(bundle_root)

            logger.info("Copying your custom application inside Bonita")
            self._inject(bundle_root, self.config.application_path)
            if self.config.configuration_file:
                logger.info("Copying your Bonita configuration file inside Bonita")
                self._inject(bundle_root, self.config.configuration_file)

            logger.info("Re-packing Bonita bundle containing your application")
            archive = self.output_dir / f"{bundle_name}-application.zip"
            zip_directory(archive, bundle_root, root_name)
        finally:
            if bundle_root.is_dir():
                logger.debug("Cleaning temporary folder structure")
                shutil.rmtree(bundle_root)

        logger.info("Successfully re-packaged self-contained application: %s", archive)
        return archive

    def _clean_output(self):
        if self.output_dir.exists():
            logger.debug("Cleaning '%s' folder", self.output_dir)
            try:
                shutil.rmtree(self.output_dir)
            except OSError as exc:
                raise ArchiveError(f"Failed to clean '{self.output_dir}' folder: {exc}") from exc

    def _unpack_war(self, bundle_root: Path):
        """Replaces bonita.war by its extracted content."""
        webapps = bundle_root / WEBAPPS_DIR
        war = webapps / WAR_NAME
        if not war.is_file():
            raise PackagingError(f"Bonita WAR file not found in bundle: {war}")
        logger.info("Unpacking Bonita WAR file")
        safe_extract(war, webapps / WEBAPP_NAME)
        logger.debug("Removing unpacked Bonita WAR file")
        try:
            war.unlink()
        except OSError as exc:
            raise ArchiveError(f"Failed to remove {war}: {exc}") from exc

    def _inject(self, bundle_root: Path, resource: Path):
        """Copies a file or directory into the custom application folder."""
        target_dir = bundle_root / WEBAPPS_DIR / WEBAPP_NAME / CUSTOM_APPLICATION_DIR
        if not target_dir.is_dir():
            raise PackagingError(
                f"Custom application folder not found in Bonita bundle: {target_dir}"
            )
        target = target_dir / os.path.basename(os.path.normpath(resource))
        try:
            if os.path.isdir(resource):
                shutil.copytree(resource, target, dirs_exist_ok=True)
            else:
                shutil.copy2(resource, target)
        except OSError as exc:
            raise ArchiveError(f"Failed to copy {resource} into {target_dir}: {exc}") from exc
