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
Resolution of the Bonita Tomcat bundle to repackage.
"""
import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

BUNDLE_PATTERN = "Bonita*.zip"
BUNDLE_EXTENSION = ".zip"


def locate_bundle(
    bundle_file: Optional[Union[str, Path]] = None,
    search_dir: Union[str, Path] = ".",
) -> Optional[Path]:
    """
    Finds the Bonita Tomcat bundle archive to work on.

    An explicit ``bundle_file`` must exist and be a zip file. Without one, the
    first ``Bonita*.zip`` file of ``search_dir`` is used.

    :param bundle_file: Path given by the user, if any.
    :param search_dir: Directory searched when no path is given.
    :return: The bundle path, or None after explaining to the user why none
        could be resolved.
    """
    if bundle_file:
        bundle = Path(bundle_file)
        if not bundle.exists():
            logger.error("Bonita Tomcat bundle file passed as parameter does not exist: %s", bundle)
            return None
        if bundle.suffix.lower() != BUNDLE_EXTENSION:
            logger.error(
                "Bonita Tomcat bundle file passed as parameter is not a proper "
                "Bonita Tomcat bundle ZIP file: %s", bundle
            )
            return None
        logger.debug("Using Bonita Tomcat bundle file passed as parameter %s", bundle)
        return bundle

    matches = sorted(Path(search_dir).glob(BUNDLE_PATTERN))
    if not matches:
        logger.error("Bonita Tomcat Bundle not found in current folder.")
        logger.error("Please copy it here (Eg. BonitaCommunity-2023.1-u0.zip, BonitaSubscription-2023.1-u2.zip)")
        logger.error("or use parameter --bonita-tomcat-bundle <PATH_TO_TOMCAT_BUNDLE> if stored somewhere else.")
        logger.error("Then re-run this program")
        return None
    logger.debug("Using Bonita Tomcat bundle file found in current folder %s", matches[0])
    return matches[0]
