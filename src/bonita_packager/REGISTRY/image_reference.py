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
Image reference handling.
Splits references like 'bonita:2023.2' or 'registry.example.com/bonita:1.0'
into the name, tag and digest the Docker daemon API expects.
"""

from typing import Optional
from dataclasses import dataclass


@dataclass(frozen=True)
class ImageReference:
    """
    Docker image reference, kept as written by the user.

    Examples:
        - bonita -> name 'bonita', tag 'latest'
        - bonita:2023.2 -> name 'bonita', tag '2023.2'
        - localhost:5000/bonita:1.0 -> name 'localhost:5000/bonita', tag '1.0'
        - bonita@sha256:abc123 -> name 'bonita', digest 'sha256:abc123'
    """

    name: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    DEFAULT_REGISTRY = "docker.io"
    DEFAULT_TAG = "latest"

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """
        Parse a Docker image reference string.

        Args:
            reference: Image reference string (e.g., 'bonita:latest', 'myuser/myimage:v1')

        Returns:
            Parsed ImageReference object.
        """
        if not reference:
            raise ValueError("Empty image reference")

        digest = None
        if "@" in reference:
            reference, digest = reference.rsplit("@", 1)

        tag = None
        if ":" in reference:
            last_colon = reference.rfind(":")
            after_colon = reference[last_colon + 1 :]
            # A colon followed by a slash belongs to a registry port
            if "/" not in after_colon:
                tag = after_colon
                reference = reference[:last_colon]

        if not reference:
            raise ValueError("Image reference has no name")

        if not tag and not digest:
            tag = cls.DEFAULT_TAG

        return cls(name=reference, tag=tag, digest=digest)

    @property
    def registry_host(self) -> str:
        """
        Registry to authenticate against.

        Everything before the first '/' of the name, or Docker Hub when the
        name has no '/'. A plain namespace such as 'library/bonita' is taken
        for a registry host as well.
        """
        registry, sep, _ = self.name.partition("/")
        if not sep:
            return self.DEFAULT_REGISTRY
        return registry

    @property
    def pull_tag(self) -> Optional[str]:
        """Tag or digest to hand to the daemon pull endpoint."""
        return self.digest or self.tag

    @property
    def full_name(self) -> str:
        if self.digest:
            return f"{self.name}@{self.digest}"
        if self.tag:
            return f"{self.name}:{self.tag}"
        return self.name

    def __str__(self) -> str:
        return self.full_name

    def __repr__(self) -> str:
        return f"ImageReference({self.full_name})"
