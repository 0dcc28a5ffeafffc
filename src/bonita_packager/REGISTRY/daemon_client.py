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
Access to the Docker daemon image endpoints.
Wraps the docker SDK low-level API client behind the few calls the
packager needs.
"""

import logging
from dataclasses import dataclass, field
from typing import IO, Any, Dict, Iterator, List, Optional, Protocol

import docker
from docker.errors import DockerException
from requests.exceptions import RequestException

from ..errors import DaemonError
from .image_reference import ImageReference

logger = logging.getLogger(__name__)


@dataclass
class RegistryAuth:
    """Credentials for one registry."""

    registry: str
    username: str
    password: str

    def as_auth_config(self) -> Dict[str, str]:
        """Auth config in the shape the docker SDK encodes for the daemon."""
        return {
            "username": self.username,
            "password": self.password,
            "serveraddress": self.registry,
        }


@dataclass
class BuildOptions:
    """Parameters of an image build."""

    tags: List[str]
    dockerfile: str = "Dockerfile"
    build_args: Dict[str, str] = field(default_factory=dict)
    auth_configs: Dict[str, RegistryAuth] = field(default_factory=dict)
    remove_intermediate: bool = True


class BuildDaemonClient(Protocol):
    """
    Image pull and build endpoints of a daemon.

    Pull and build return the decoded JSON progress messages as they arrive:
    ``{"stream": ...}``, ``{"status": ...}``, ``{"error": ..., "errorDetail": {"message": ...}}``.
    """

    def pull_image(
        self, reference: ImageReference, auth: Optional[RegistryAuth] = None
    ) -> Iterator[Dict[str, Any]]:
        ...

    def build_image(self, context: IO[bytes], options: BuildOptions) -> Iterator[Dict[str, Any]]:
        ...

    def tag_image(self, source: str, target: ImageReference) -> None:
        ...


class DockerDaemonClient:
    """
    BuildDaemonClient backed by ``docker.APIClient``.

    The connection settings come from the usual DOCKER_HOST, DOCKER_TLS_VERIFY
    and DOCKER_CERT_PATH environment variables.
    """

    def __init__(self, timeout: float, api: Optional[docker.APIClient] = None):
        """
        Initialize the client.

        Args:
            timeout: Timeout in seconds applied to every daemon request.
            api: Pre-configured low-level client, mostly for tests.
        """
        if api is None:
            try:
                api = docker.APIClient(
                    version="auto", timeout=timeout, **docker.utils.kwargs_from_env()
                )
            except (DockerException, RequestException) as e:
                raise DaemonError(f"Cannot connect to the Docker daemon: {e}") from e
        self._api = api

    def pull_image(
        self, reference: ImageReference, auth: Optional[RegistryAuth] = None
    ) -> Iterator[Dict[str, Any]]:
        auth_config = auth.as_auth_config() if auth else None
        try:
            # The SDK sends auth_config base64-encoded in X-Registry-Auth
            stream = self._api.pull(
                reference.name,
                tag=reference.pull_tag,
                stream=True,
                decode=True,
                auth_config=auth_config,
            )
            yield from stream
        except (DockerException, RequestException) as e:
            raise DaemonError(f"Failed to pull image {reference}: {e}") from e

    def build_image(self, context: IO[bytes], options: BuildOptions) -> Iterator[Dict[str, Any]]:
        primary = options.tags[0]
        for auth in options.auth_configs.values():
            self._add_auth(auth)
        try:
            stream = self._api.build(
                fileobj=context,
                custom_context=True,
                tag=primary,
                dockerfile=options.dockerfile,
                buildargs=options.build_args,
                rm=options.remove_intermediate,
                decode=True,
            )
            yield from stream
        except (DockerException, RequestException) as e:
            raise DaemonError(f"Failed to build image {primary}: {e}") from e

    def _add_auth(self, auth: RegistryAuth) -> None:
        """
        Stores credentials in the client's auth config without contacting the
        registry. The SDK sends every stored entry with the build in
        X-Registry-Config.
        """
        logger.debug("Adding build credentials for registry: %s", auth.registry)
        self._api._auth_configs.add_auth(auth.registry, auth.as_auth_config())

    def tag_image(self, source: str, target: ImageReference) -> None:
        try:
            self._api.tag(source, target.name, tag=target.tag)
        except (DockerException, RequestException) as e:
            raise DaemonError(f"Failed to tag image {source} as {target}: {e}") from e
