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
Builds a Bonita Docker image embedding a custom application.
"""
import logging
from typing import Any, Callable, Dict, Iterable, Optional

import click

from ..MODELS.build_message import BuildMessage
from ..MODELS.package_config import DockerPackageConfig
from ..REGISTRY.daemon_client import BuildDaemonClient, BuildOptions, RegistryAuth
from ..REGISTRY.image_reference import ImageReference
from ..errors import ImageBuildError, InvalidInputError
from .build_context import DOCKERFILE_NAME, BuildContext

logger = logging.getLogger(__name__)

BASE_IMAGE_ARG = "BONITA_BASE_IMAGE"
BASE_IMAGE_VERSION_ARG = "BONITA_BASE_IMAGE_VERSION"

PasswordPrompt = Callable[[str], str]


def prompt_password(username: str) -> str:
    """Asks for the registry password on the terminal, without echo."""
    return click.prompt(
        f"Enter your password to access the Docker Registry corresponding to '{username}'",
        hide_input=True,
    )


def relay_messages(messages: Iterable[Dict[str, Any]], verbose: bool = False) -> Optional[BuildMessage]:
    """
    Consumes a daemon progress stream.

    Progress text is logged when ``verbose`` is set. The daemon reports build
    failures inside the stream rather than as a transport error, so the
    stream is abandoned at the first message carrying an error.

    :param messages: Decoded JSON messages from the daemon.
    :param verbose: Log the progress text.
    :return: The last message, None for an empty stream.
    :raises ImageBuildError: with the daemon message of the first error in the stream.
    """
    last = None
    for raw in messages:
        last = BuildMessage.from_raw(raw)
        if verbose and last.text:
            logger.info(last.text)
        if last.error_message:
            raise ImageBuildError(last.error_message)
    return last


class ImageBuilder:
    """
    Pulls the Bonita base image, builds the custom application image on top
    of it through the Docker daemon, and tags the result.
    """
    def __init__(
        self,
        config: DockerPackageConfig,
        client: BuildDaemonClient,
        prompt: Optional[PasswordPrompt] = None,
    ):
        """
        Initializes the ImageBuilder.

        :param config: Validated packaging settings.
        :param client: Daemon the image is built on.
        :param prompt: Asks for the registry password when only a username is given.
        """
        self.config = config
        self.client = client
        self.prompt = prompt or prompt_password

    def build(self) -> str:
        """
        Builds the image.

        :return: The primary tag of the built image.
        """
        logger.info("Generating your Custom Application Bonita Docker image...")
        config = self.complete_credentials(self.config)
        base_image = config.base_image_reference
        auth = self.registry_auth(config, base_image)
        options = BuildOptions(
            tags=list(config.tags),
            dockerfile=DOCKERFILE_NAME,
            build_args=self.build_args(base_image),
            auth_configs={auth.registry: auth} if auth else {},
        )

        if base_image is not None and config.pull:
            self.pull_base_image(base_image, auth)

        primary = options.tags[0]
        logger.debug("Building new image: %s", primary)

        with BuildContext(config) as context:
            relay_messages(
                self.client.build_image(context.tar_stream(), options),
                verbose=config.verbose,
            )

        for extra in options.tags[1:]:
            logger.debug("Tagging image %s as %s", primary, extra)
            self.client.tag_image(primary, ImageReference.parse(extra))

        logger.info("Successfully created Docker image '%s'", primary)
        return primary

    def complete_credentials(self, config: DockerPackageConfig) -> DockerPackageConfig:
        """Prompts for the missing registry password, if needed."""
        if not config.needs_password:
            return config
        password = self.prompt(config.registry_username)
        return config.model_copy(update={"registry_password": password})

    @staticmethod
    def registry_auth(
        config: DockerPackageConfig, base_image: Optional[ImageReference]
    ) -> Optional[RegistryAuth]:
        if not config.has_credentials:
            return None
        registry = base_image.registry_host if base_image else ImageReference.DEFAULT_REGISTRY
        return RegistryAuth(
            registry=registry,
            username=config.registry_username,
            password=config.registry_password,
        )

    @staticmethod
    def build_args(base_image: Optional[ImageReference]) -> Dict[str, str]:
        if base_image is None:
            return {}
        if base_image.digest:
            raise InvalidInputError(
                f"Base image must be referenced by tag, not by digest: {base_image}"
            )
        return {
            BASE_IMAGE_ARG: base_image.name,
            BASE_IMAGE_VERSION_ARG: base_image.tag or ImageReference.DEFAULT_TAG,
        }

    def pull_base_image(self, base_image: ImageReference, auth: Optional[RegistryAuth]):
        logger.info("Pulling base image %s", base_image)
        relay_messages(self.client.pull_image(base_image, auth), verbose=self.config.verbose)
