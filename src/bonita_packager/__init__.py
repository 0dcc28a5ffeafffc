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
Bonita Application Packager

Repackages a Bonita Tomcat bundle or a Bonita Docker base image so that it
embeds a custom application and installs it at startup without further
manual operations.
"""

__version__ = "0.1.0"
__author__ = "The Bonita Application Packager Authors"
__license__ = "Apache-2.0"
