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
Logging configuration for the command line tool.
"""
import logging
import sys

DEFAULT_FORMAT = "%(message)s"


def setup_logging(verbose: bool = False, fmt: str = DEFAULT_FORMAT) -> None:
    """
    Configures the root logger to print progress messages on stdout.

    :param verbose: Also print debug messages.
    :param fmt: Log message format string.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=fmt,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # The docker SDK and urllib3 are chatty at debug level
    for name in ("docker", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)
