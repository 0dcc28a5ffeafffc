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
Command Line Interface for the Bonita application packager.
"""
import click
from pydantic import ValidationError

from .. import __version__
from ..BUILDERS.image_builder import ImageBuilder
from ..MODELS.package_config import (
    DEFAULT_BASE_IMAGE,
    DEFAULT_BUILD_TIMEOUT,
    DEFAULT_IMAGE_TAG,
    DockerPackageConfig,
    TomcatPackageConfig,
)
from ..PACKAGERS.tomcat_packager import TomcatPackager
from ..REGISTRY.daemon_client import DockerDaemonClient
from ..REGISTRY.image_reference import ImageReference
from ..UTILS.logging_utils import setup_logging
from ..errors import PackagerError

EXISTING_FILE = click.Path(exists=True)


def print_final_note(additional_note: str):
    click.echo(
        "\nNOTE: if your custom application is using pages from Bonita Admin or User applications, "
        f"{additional_note} in order to install those pages, else, your application will fail at install."
    )


def _validate_image(ctx, param, value):
    values = value if isinstance(value, tuple) else (value,)
    for image in values:
        if image is None:
            continue
        try:
            ImageReference.parse(image)
        except ValueError as e:
            raise click.BadParameter(f"'{image}': {e}")
    return value


def _build_config(model, **kwargs):
    try:
        return model(**kwargs)
    except ValidationError as e:
        raise click.UsageError(str(e))


@click.group()
@click.version_option(__version__, message="Bonita CLI %(version)s")
def cli():
    """
    This tool allows to build a Bonita Tomcat bundle or a Bonita Docker image
    containing your custom application.
    """


@cli.group()
@click.option('--verbose', '-v', is_flag=True, help='More verbose information output')
@click.option(
    '--configuration-file', '-c', type=click.Path(exists=True, dir_okay=False),
    help='Path to the Bonita configuration file (.bconf) associated to your custom application (Subscription only)',
)
@click.pass_context
def package(ctx, verbose, configuration_file):
    """
    Package your Custom Application within a Bonita Tomcat Bundle or a Bonita Docker image.

    The resulting package is self-contained and deploys itself entirely at
    startup without further manual operations.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['configuration_file'] = configuration_file


@package.command()
@click.argument('application', type=EXISTING_FILE)
@click.option(
    '--bonita-tomcat-bundle', '-b', 'bundle_file',
    help='Path to the Bonita Tomcat bundle file (Bonita*.zip). '
         'If not passed, looking for a Bonita Tomcat bundle in current folder',
)
@click.pass_context
def tomcat(ctx, application, bundle_file):
    """Package your Custom Application within a Bonita Tomcat Bundle."""
    config = _build_config(
        TomcatPackageConfig,
        application_path=application,
        configuration_file=ctx.obj.get('configuration_file'),
        verbose=ctx.obj.get('verbose', False),
        bundle_file=bundle_file,
    )
    try:
        archive = TomcatPackager(config).package()
    except PackagerError as e:
        raise click.ClickException(str(e))
    if archive is None:
        ctx.exit(1)

    click.echo("\nTo use it, simply unzip it like your usual Bonita Tomcat bundle, and run ./start-bonita[.sh|.bat]")
    click.echo("More info at https://documentation.bonitasoft.com/bonita/latest/runtime/tomcat-bundle")
    print_final_note(
        "ensure to set the Bonita runtime property "
        "'bonita.runtime.custom-application.install-provided-pages=true' in bundle configuration"
    )


@package.command()
@click.argument('application', type=EXISTING_FILE)
@click.option('--tag', '-t', 'tags', multiple=True, callback=_validate_image,
              help=f'Docker image tag to use when building (default: {DEFAULT_IMAGE_TAG}), can be repeated')
@click.option('--bonita-base-image', '-i', 'base_image', default=DEFAULT_BASE_IMAGE, show_default=True,
              callback=_validate_image, help='Bonita base docker image')
@click.option('--bonita-base-image-version', 'base_image_version',
              help='Version of the Bonita base docker image, overrides the tag of --bonita-base-image')
@click.option('--registry-username', '-u', help='Username to authenticate against the base image registry')
@click.option('--registry-password', '-p',
              help='Password to authenticate against the base image registry. '
                   'If --registry-username is provided and not --registry-password, '
                   'password will be prompted interactively')
@click.option('--pull/--no-pull', default=True, show_default=True, help='Pull the base image before building')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=DEFAULT_BUILD_TIMEOUT,
              show_default=True, help='Timeout in seconds of Docker daemon requests')
@click.pass_context
def docker(ctx, application, tags, base_image, base_image_version, registry_username,
           registry_password, pull, timeout):
    """Package your Custom Application inside a Bonita Docker image."""
    config = _build_config(
        DockerPackageConfig,
        application_path=application,
        configuration_file=ctx.obj.get('configuration_file'),
        verbose=ctx.obj.get('verbose', False),
        tags=list(tags) or [DEFAULT_IMAGE_TAG],
        base_image=base_image,
        base_image_version=base_image_version,
        registry_username=registry_username,
        registry_password=registry_password,
        pull=pull,
        timeout=timeout,
    )
    try:
        client = DockerDaemonClient(timeout=config.timeout)
        tag = ImageBuilder(config, client).build()
    except PackagerError as e:
        raise click.ClickException(str(e))

    click.echo("\nTo use it, run appropriate command:")
    click.echo(f"- Community release    : docker run --name my-bonita-app -d -p 8080:8080 {tag}")
    click.echo(
        "- Subscription release : docker run --name my-bonita-app -h <hostname> "
        f"-v <license-folder>:/opt/bonita_lic/ -d -p 8080:8080 {tag}"
    )
    click.echo("Read https://documentation.bonitasoft.com/bonita/latest/runtime/bonita-docker-installation "
               "for complete options on how to run a Bonita-based Docker container.")
    print_final_note("ensure to set the environment variable 'INSTALL_PROVIDED_PAGES=true' when running container")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
