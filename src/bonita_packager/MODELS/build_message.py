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
Messages streamed back by the Docker daemon while pulling or building.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: Optional[str] = None


class BuildMessage(BaseModel):
    """
    One JSON message of a daemon progress stream.

    Only the fields the packager reads are declared; everything else
    (``progressDetail``, ``aux``, ``id``...) is kept as extra data.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    stream: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[str] = None
    error: Optional[str] = None
    error_detail: Optional[ErrorDetail] = Field(default=None, alias="errorDetail")

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "BuildMessage":
        return cls.model_validate(raw)

    @property
    def error_message(self) -> Optional[str]:
        """The error carried by this message, ``None`` when it is not an error."""
        if self.error:
            return self.error
        if self.error_detail and self.error_detail.message:
            return self.error_detail.message
        return None

    @property
    def text(self) -> Optional[str]:
        """Human readable progress text, without the trailing newline."""
        if self.stream is not None:
            return self.stream.rstrip("\n")
        if self.status is not None:
            parts = [self.status]
            if self.progress:
                parts.append(self.progress)
            return " ".join(parts)
        return None
