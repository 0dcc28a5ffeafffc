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
Shared fixtures: fake Bonita bundles, applications and Docker daemon.
"""
import io
import tarfile
import zipfile

import pytest

BUNDLE_NAME = "BonitaCommunity-2023.1-u0"


def _war_bytes(with_custom_app_dir: bool) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as war:
        war.writestr("WEB-INF/", b"")
        war.writestr("WEB-INF/web.xml", "<web-app/>")
        war.writestr("WEB-INF/classes/", b"")
        if with_custom_app_dir:
            war.writestr("WEB-INF/classes/my-application/", b"")
        war.writestr("index.html", "<html/>")
    return buffer.getvalue()


@pytest.fixture
def make_bundle():
    """Factory writing a minimal Bonita Tomcat bundle zip into a directory."""
    def _make(directory, name=BUNDLE_NAME, with_custom_app_dir=True):
        path = directory / f"{name}.zip"
        with zipfile.ZipFile(path, "w") as bundle:
            bundle.writestr(f"{name}/", b"")
            script = zipfile.ZipInfo(f"{name}/start-bonita.sh")
            script.external_attr = 0o100755 << 16
            bundle.writestr(script, "#!/bin/sh\n")
            bundle.writestr(f"{name}/server/", b"")
            bundle.writestr(f"{name}/server/webapps/", b"")
            bundle.writestr(f"{name}/server/webapps/bonita.war", _war_bytes(with_custom_app_dir))
            bundle.writestr(f"{name}/setup/", b"")
        return path
    return _make


@pytest.fixture
def application(tmp_path):
    """A custom application archive outside of the working directory."""
    app_dir = tmp_path / "inputs"
    app_dir.mkdir(exist_ok=True)
    app = app_dir / "my-app.zip"
    app.write_bytes(b"PK fake application")
    return app


@pytest.fixture
def configuration_file(tmp_path):
    app_dir = tmp_path / "inputs"
    app_dir.mkdir(exist_ok=True)
    bconf = app_dir / "my-app.bconf"
    bconf.write_bytes(b"fake configuration")
    return bconf


@pytest.fixture
def work_dir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


BUILD_OK = [
    {"stream": "Step 1/3 : ARG BONITA_BASE_IMAGE=bonita\n"},
    {"stream": "Step 3/3 : COPY resources/ /opt/bonita/\n"},
    {"aux": {"ID": "sha256:0123"}},
    {"stream": "Successfully built 0123\n"},
]
PULL_OK = [
    {"status": "Pulling from library/bonita", "id": "latest"},
    {"status": "Status: Image is up to date for bonita:latest"},
]


class FakeDaemonClient:
    """Records the calls and replays canned progress streams."""

    def __init__(self):
        self.build_messages = list(BUILD_OK)
        self.pull_messages = list(PULL_OK)
        self.pulls = []
        self.builds = []
        self.tags = []
        self.context_files = None

    def pull_image(self, reference, auth=None):
        self.pulls.append((reference, auth))
        return iter(self.pull_messages)

    def build_image(self, context, options):
        with tarfile.open(fileobj=context) as tar:
            self.context_files = {m.name for m in tar.getmembers() if m.isfile()}
        self.builds.append(options)
        return iter(self.build_messages)

    def tag_image(self, source, target):
        self.tags.append((source, target.full_name))


@pytest.fixture
def daemon_client():
    """Fake Docker daemon; set build_messages / pull_messages to script it."""
    return FakeDaemonClient()
