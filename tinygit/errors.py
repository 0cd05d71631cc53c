# errors.py -- Exception classes for tinygit
# Copyright (C) 2026 The tinygit developers
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# tinygit is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""tinygit-related exception classes."""

__all__ = [
    "AmbiguousHash",
    "ConfigMissing",
    "CorruptObject",
    "FileFormatException",
    "FileReadError",
    "FileWriteError",
    "NotCommitError",
    "NotGitRepository",
    "NotTreeError",
    "NothingToCommit",
    "ObjectNotFound",
    "WrongObjectException",
]

import os
from collections.abc import Sequence


def _display(value: str | bytes | os.PathLike[str] | os.PathLike[bytes]) -> str:
    value = os.fspath(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    return value


class FileReadError(Exception):
    """A file could not be read."""

    def __init__(
        self,
        path: str | bytes | os.PathLike[str] | os.PathLike[bytes],
        reason: object = None,
    ) -> None:
        """Initialize a FileReadError.

        Args:
            path: Path of the file that could not be read.
            reason: The underlying error, if any.
        """
        self.path = path
        self.reason = reason
        message = f"unable to read {_display(path)}"
        if reason is not None:
            message += f": {reason}"
        Exception.__init__(self, message)


class FileWriteError(Exception):
    """A file could not be written."""

    def __init__(
        self,
        path: str | bytes | os.PathLike[str] | os.PathLike[bytes],
        reason: object = None,
    ) -> None:
        """Initialize a FileWriteError.

        Args:
            path: Path of the file that could not be written.
            reason: The underlying error, if any.
        """
        self.path = path
        self.reason = reason
        message = f"unable to write {_display(path)}"
        if reason is not None:
            message += f": {reason}"
        Exception.__init__(self, message)


class ObjectNotFound(Exception):
    """Indicates that a requested object is not in the object store."""

    def __init__(self, sha: bytes, *args: object) -> None:
        """Initialize an ObjectNotFound exception.

        Args:
            sha: The (possibly abbreviated) SHA that was looked up.
            *args: Additional positional arguments.
        """
        self.sha = sha
        Exception.__init__(self, f"object {_display(sha)} not found", *args)


class AmbiguousHash(Exception):
    """An abbreviated SHA matches more than one object."""

    def __init__(self, prefix: bytes, candidates: Sequence[bytes]) -> None:
        """Initialize an AmbiguousHash exception.

        Args:
            prefix: The abbreviated SHA.
            candidates: Full SHAs of all matching objects.
        """
        self.prefix = prefix
        self.candidates = list(candidates)
        Exception.__init__(
            self,
            f"short object id {_display(prefix)} is ambiguous "
            f"({len(self.candidates)} candidates)",
        )


class FileFormatException(Exception):
    """Base class for exceptions relating to reading git file formats."""


class CorruptObject(FileFormatException):
    """An object on disk could not be decoded."""

    def __init__(self, message: str, sha: bytes | None = None) -> None:
        """Initialize a CorruptObject exception.

        Args:
            message: Description of what is wrong with the object.
            sha: The SHA of the object, if known.
        """
        self.sha = sha
        if sha is not None:
            message = f"object {_display(sha)} is corrupt: {message}"
        Exception.__init__(self, message)


class NothingToCommit(Exception):
    """The index is empty, so there is nothing to commit."""

    def __init__(self, *args: object) -> None:
        """Initialize a NothingToCommit exception.

        Args:
            *args: Error message and additional positional arguments.
        """
        if not args:
            args = ("nothing to commit",)
        Exception.__init__(self, *args)


class ConfigMissing(Exception):
    """A required configuration value is not set."""

    def __init__(self, key: str) -> None:
        """Initialize a ConfigMissing exception.

        Args:
            key: Dotted name of the missing setting, e.g. "user.email".
        """
        self.key = key
        Exception.__init__(self, f"missing configuration value {key}")


class NotGitRepository(Exception):
    """Indicates that no Git repository was found."""

    def __init__(self, *args: object, **kwargs: object) -> None:
        """Initialize a NotGitRepository exception.

        Args:
            *args: Error message and additional positional arguments.
            **kwargs: Additional keyword arguments.
        """
        Exception.__init__(self, *args, **kwargs)


class WrongObjectException(Exception):
    """Baseclass for all the _ is not a _ exceptions on objects.

    Do not instantiate directly.

    Subclasses should define a type_name attribute that indicates what
    was expected if they were raised.
    """

    type_name: str

    def __init__(self, sha: bytes, *args: object) -> None:
        """Initialize a WrongObjectException.

        Args:
            sha: The SHA of the object that was not of the expected type.
            *args: Additional positional arguments.
        """
        self.sha = sha
        Exception.__init__(self, f"{_display(sha)} is not a {self.type_name}", *args)


class NotCommitError(WrongObjectException):
    """Indicates that the sha requested does not point to a commit."""

    type_name = "commit"


class NotTreeError(WrongObjectException):
    """Indicates that the sha requested does not point to a tree."""

    type_name = "tree"
