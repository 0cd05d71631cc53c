# file.py -- Lock-protected writes of repository files
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

"""Lock-protected writes of repository files.

Every file under the control directory that tinygit rewrites (the index,
refs, HEAD and loose objects) is written through :func:`GitFile`. Writes go
to ``<name>.lock``, created exclusively, and are renamed over ``<name>`` on
close. A second writer that finds the lock file present fails with
:class:`FileLocked` instead of racing the first one.
"""

__all__ = [
    "FileLocked",
    "GitFile",
    "ensure_dir_exists",
]

import os
import warnings
from types import TracebackType
from typing import IO, Literal, overload

from ._typing import Buffer
from .errors import FileWriteError

PathType = str | bytes | os.PathLike[str] | os.PathLike[bytes]

_LOCK_FLAGS = os.O_RDWR | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0)


def ensure_dir_exists(dirname: PathType) -> None:
    """Create dirname and any missing parents; an existing one is fine."""
    try:
        os.makedirs(dirname, exist_ok=True)
    except OSError as exc:
        raise FileWriteError(dirname, exc) from exc


@overload
def GitFile(
    filename: PathType, mode: Literal["wb"], fsync: bool = True
) -> "_GitFile": ...


@overload
def GitFile(
    filename: PathType, mode: Literal["rb"] = "rb", fsync: bool = True
) -> IO[bytes]: ...


def GitFile(
    filename: PathType, mode: str = "rb", fsync: bool = True
) -> "IO[bytes] | _GitFile":
    """Open a repository file.

    Reading gives a plain binary file. Writing takes the file's lock and
    gives a :class:`_GitFile` whose contents replace the file on close.

    Args:
      filename: Path to the file
      mode: Either "rb" or "wb"
      fsync: Whether written data is synced to disk before the rename
    Raises:
      ValueError: for any other mode
      FileLocked: if another writer holds the lock
    """
    if mode == "rb":
        return open(filename, "rb")
    if mode == "wb":
        return _GitFile(filename, fsync)
    raise ValueError(f"unsupported mode for git files: {mode!r}")


class FileLocked(FileWriteError):
    """The lock file for a path is held by someone else."""

    def __init__(self, filename: PathType, lockfilename: str | bytes) -> None:
        self.filename = filename
        self.lockfilename = lockfilename
        super().__init__(filename, "lock file exists")


class _GitFile:
    """Pending replacement of a file, staged in its lock file.

    close() renames the lock file over the target, abort() deletes it. One
    of the two must run for the lock to be released; the context manager
    closes on a clean exit and aborts when an exception escapes.
    """

    def __init__(self, filename: PathType, fsync: bool = True) -> None:
        self._filename: str | bytes = os.fspath(filename)
        self._fsync = fsync
        self._lockfilename: str | bytes
        if isinstance(self._filename, bytes):
            self._lockfilename = self._filename + b".lock"
        else:
            self._lockfilename = self._filename + ".lock"
        try:
            fd = os.open(self._lockfilename, _LOCK_FLAGS, 0o644)
        except FileExistsError as exc:
            raise FileLocked(filename, self._lockfilename) from exc
        except OSError as exc:
            raise FileWriteError(filename, exc) from exc
        self._file = os.fdopen(fd, "wb")
        self._closed = False

    @property
    def name(self) -> str | bytes:
        return self._filename

    @property
    def closed(self) -> bool:
        return self._closed

    def __fspath__(self) -> str | bytes:
        return self._filename

    def write(self, data: Buffer, /) -> int:
        return self._file.write(data)

    def abort(self) -> None:
        """Drop the pending contents and release the lock."""
        if self._closed:
            return
        self._closed = True
        self._file.close()
        try:
            os.remove(self._lockfilename)
        except FileNotFoundError:
            pass

    def close(self) -> None:
        """Move the pending contents into place and release the lock.

        Raises:
          FileWriteError: if the data could not be written or renamed; the
            target is left untouched and the lock is released
        """
        if self._closed:
            return
        try:
            self._file.flush()
            if self._fsync:
                os.fsync(self._file.fileno())
            self._file.close()
            os.replace(self._lockfilename, self._filename)
        except OSError as exc:
            self.abort()
            raise FileWriteError(self._filename, exc) from exc
        self._closed = True

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            warnings.warn(f"unclosed {self!r}", ResourceWarning, stacklevel=2)
            self.abort()

    def __enter__(self) -> "_GitFile":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()
