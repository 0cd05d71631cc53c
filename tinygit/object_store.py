# object_store.py -- Loose object storage
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

"""Git object store interfaces and implementation."""

__all__ = [
    "DiskObjectStore",
    "MIN_ABBREV_LENGTH",
    "OBJECT_MODE",
]

import os
import string
import sys
import tempfile
from collections.abc import Iterator

from . import log_utils
from .errors import AmbiguousHash, FileReadError, FileWriteError, ObjectNotFound
from .file import GitFile
from .hash import (
    HEX_LENGTH,
    compress,
    decompress,
    hex_to_filename,
    hexdigest,
    valid_hexsha,
)
from .objects import ShaFile, object_header, split_object

logger = log_utils.getLogger(__name__)

# Shortest abbreviation accepted when resolving object ids.
MIN_ABBREV_LENGTH = 7

OBJECT_MODE = 0o444 if sys.platform != "win32" else 0o644

_HEXDIGITS = set(string.hexdigits.encode("ascii"))


class DiskObjectStore:
    """Git-style object store that exists on disk as loose objects."""

    def __init__(
        self, path: str | os.PathLike[str], fsync_object_files: bool = False
    ) -> None:
        """Open an object store.

        Args:
          path: Path of the object store, usually ``.git/objects``
          fsync_object_files: Whether to fsync object files before they are
            renamed into place
        """
        self.path = os.fspath(path)
        self.fsync_object_files = fsync_object_files

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.path!r})>"

    @classmethod
    def init(cls, path: str | os.PathLike[str]) -> "DiskObjectStore":
        """Create the object store directory, if missing, and open it."""
        try:
            os.mkdir(path)
        except FileExistsError:
            pass
        except OSError as exc:
            raise FileWriteError(path, exc) from exc
        return cls(path)

    def _get_shafile_path(self, sha: bytes) -> str:
        return hex_to_filename(self.path, sha)

    def __contains__(self, sha: bytes) -> bool:
        """Check if a particular object is present by SHA1."""
        if not valid_hexsha(sha):
            return False
        return os.path.exists(self._get_shafile_path(sha.lower()))

    def __iter__(self) -> Iterator[bytes]:
        """Iterate over the SHAs of all objects in the store."""
        try:
            bases = sorted(os.listdir(self.path))
        except FileNotFoundError:
            return
        for base in bases:
            if len(base) != 2:
                continue
            yield from self._iter_subdir(base, "")

    def _iter_subdir(self, base: str, rest: str) -> Iterator[bytes]:
        try:
            names = sorted(os.listdir(os.path.join(self.path, base)))
        except (FileNotFoundError, NotADirectoryError):
            return
        for name in names:
            if not name.startswith(rest):
                continue
            sha = os.fsencode(base + name)
            # Skips temporary files left by an interrupted write.
            if valid_hexsha(sha):
                yield sha

    def add_raw(self, type_name: bytes, data: bytes) -> bytes:
        """Store an object given its type name and body.

        The object is only written if it is not already present.

        Args:
          type_name: Object type, e.g. b"blob"
          data: Object body, without header
        Returns: Hex SHA of the object
        """
        return self._add_framed(object_header(type_name, len(data)) + data)

    def add_object(self, obj: ShaFile) -> bytes:
        """Add a single object to this object store.

        Args:
          obj: Object to add
        Returns: Hex SHA of the object
        """
        return self._add_framed(obj.as_framed_string())

    def _add_framed(self, framed: bytes) -> bytes:
        sha = hexdigest(framed)
        path = self._get_shafile_path(sha)
        if os.path.exists(path):
            return sha
        dir = os.path.dirname(path)
        try:
            os.makedirs(dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=dir, prefix="tmp_obj_")
        except OSError as exc:
            raise FileWriteError(dir, exc) from exc
        # Writers of the same object race harmlessly: each renames its own
        # temporary file over identical content.
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(compress(framed))
                if self.fsync_object_files:
                    f.flush()
                    os.fsync(f.fileno())
            os.chmod(tmp_path, OBJECT_MODE)
            os.replace(tmp_path, path)
        except OSError as exc:
            try:
                os.remove(tmp_path)
            except FileNotFoundError:
                pass
            if os.path.exists(path):
                return sha
            raise FileWriteError(path, exc) from exc
        logger.debug("wrote object %s", sha.decode("ascii"))
        return sha

    def get_raw(self, sha: bytes) -> tuple[bytes, bytes]:
        """Obtain the raw body for an object.

        Args:
          sha: Hex SHA for the object
        Returns: Tuple with object type name and object body
        Raises:
          ObjectNotFound: if no object with that id exists
          CorruptObject: if the stored object cannot be decoded
        """
        if not valid_hexsha(sha):
            raise ObjectNotFound(sha)
        sha = sha.lower()
        path = self._get_shafile_path(sha)
        try:
            with GitFile(path, "rb") as f:
                compressed = f.read()
        except FileNotFoundError as exc:
            raise ObjectNotFound(sha) from exc
        except OSError as exc:
            raise FileReadError(path, exc) from exc
        return split_object(decompress(compressed), sha)

    def __getitem__(self, sha: bytes) -> ShaFile:
        """Obtain an object by SHA1."""
        type_name, body = self.get_raw(sha)
        return ShaFile.from_raw_string(type_name, body, sha)

    def iter_prefix(self, prefix: bytes) -> Iterator[bytes]:
        """Iterate over all object SHAs with the given hex prefix."""
        prefix = prefix.lower()
        if len(prefix) < 2:
            for sha in self:
                if sha.startswith(prefix):
                    yield sha
            return
        yield from self._iter_subdir(
            prefix[:2].decode("ascii"), prefix[2:].decode("ascii")
        )

    def resolve_prefix(self, prefix: bytes | str) -> bytes:
        """Expand an abbreviated object id to the full id.

        Args:
          prefix: At least MIN_ABBREV_LENGTH hex digits
        Returns: The full hex SHA of the single matching object
        Raises:
          ObjectNotFound: if the prefix is too short, is not hex, or matches
            nothing
          AmbiguousHash: if more than one object matches
        """
        if isinstance(prefix, str):
            prefix = prefix.encode("ascii", "replace")
        if (
            len(prefix) < MIN_ABBREV_LENGTH
            or len(prefix) > HEX_LENGTH
            or not set(prefix) <= _HEXDIGITS
        ):
            raise ObjectNotFound(prefix)
        if len(prefix) == HEX_LENGTH:
            if prefix in self:
                return prefix.lower()
            raise ObjectNotFound(prefix)
        matches = list(self.iter_prefix(prefix))
        if not matches:
            raise ObjectNotFound(prefix)
        if len(matches) > 1:
            raise AmbiguousHash(prefix, matches)
        return matches[0]
