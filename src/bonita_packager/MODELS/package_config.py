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
Immutable configuration handed to the packaging pipelines.
"""
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..REGISTRY.image_reference import ImageReference

DEFAULT_IMAGE_TAG = "my-bonita-application:latest"
DEFAULT_BASE_IMAGE = "bonita"
DEFAULT_BUILD_TIMEOUT = 300.0


class PackageConfig(BaseModel):
    """
    Settings shared by the Tomcat and Docker pipelines.
    """
    model_config = ConfigDict(frozen=True)

    application_path: Path
    configuration_file: Optional[Path] = None
    verbose: bool = False
    work_dir: Path = Field(default_factory=Path.cwd)


class TomcatPackageConfig(PackageConfig):
    """
    Settings of the Tomcat bundle pipeline.
    """
    bundle_file: Optional[Path] = None

    @property
    def output_dir(self) -> Path:
        return self.work_dir / "output"


class DockerPackageConfig(PackageConfig):
    """
    Settings of the Docker image pipeline.
    """
    tags: List[str] = Field(default_factory=lambda: [DEFAULT_IMAGE_TAG], min_length=1)
    base_image: Optional[str] = DEFAULT_BASE_IMAGE
    base_image_version: Optional[str] = None
    registry_username: Optional[str] = None
    registry_password: Optional[str] = None
    pull: bool = True
    timeout: float = DEFAULT_BUILD_TIMEOUT

    @property
    def base_image_reference(self) -> Optional[ImageReference]:
        """The base image with the explicit version applied, if any."""
        if not self.base_image:
            return None
        ref = ImageReference.parse(self.base_image)
        if self.base_image_version:
            ref = ImageReference(name=ref.name, tag=self.base_image_version)
        return ref

    @property
    def needs_password(self) -> bool:
        return bool(self.registry_username) and not self.registry_password

    @property
    def has_credentials(self) -> bool:
        return bool(self.registry_username) and bool(self.registry_password)
