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
Exceptions raised by the packaging pipelines.

Components raise these and never exit the process themselves; the CLI turns
the first one into a message and a non-zero exit code.
"""


class PackagerError(Exception):
    """Base class for every failure reported to the user."""


class InvalidInputError(PackagerError):
    """An input file is missing or is not what the pipeline expects."""


class ArchiveError(PackagerError):
    """Reading or writing an archive failed."""


class PathTraversalError(ArchiveError):
    """An archive entry would be extracted outside of the destination."""

    def __init__(self, entry_name: str, destination: str):
        super().__init__(
            f"Archive entry '{entry_name}' resolves outside of destination '{destination}'"
        )
        self.entry_name = entry_name
        self.destination = destination


class PackagingError(PackagerError):
    """The extracted bundle does not have the expected layout."""


class DaemonError(PackagerError):
    """The Docker daemon could not be reached or rejected a request."""


class ImageBuildError(PackagerError):
    """The daemon reported an error inside a pull or build progress stream."""
