# index.py -- Reading and writing the staging index
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

"""Parser for the staging index file.

The index is a plain concatenation of records, each
``"100644 <path>\\0<20 byte sha>"``. There is no header, no entry count and
no checksum. Reading is lenient: a truncated trailing record ends the parse
and the records before it are returned.
"""

__all__ = [
    "INDEX_MODE",
    "Index",
    "blob_from_path",
    "commit_tree",
    "fs_to_tree_path",
    "iter_fs_paths",
    "locked_index",
    "read_index",
    "read_index_dict",
    "write_index",
    "write_index_dict",
]

import os
import types
from collections.abc import Iterable, Iterator, MutableMapping
from typing import BinaryIO

from . import log_utils
from .errors import FileReadError
from .file import GitFile, _GitFile
from .hash import hex_to_sha, sha_to_hex
from .object_store import DiskObjectStore
from .objects import DEFAULT_FILE_MODE, Blob, Tree

logger = log_utils.getLogger(__name__)

INDEX_MODE = b"%06o" % DEFAULT_FILE_MODE

_RECORD_PREFIX_LENGTH = len(INDEX_MODE) + 1


def read_index(f: BinaryIO) -> Iterator[tuple[bytes, bytes]]:
    """Read an index file, yielding (path, hexsha) records.

    Stops quietly at the first record that is cut short.
    """
    data = f.read()
    pos = 0
    while pos < len(data):
        path_start = pos + _RECORD_PREFIX_LENGTH
        if path_start > len(data):
            break
        nul = data.find(b"\0", path_start)
        if nul == -1 or nul + 21 > len(data):
            break
        yield data[path_start:nul], sha_to_hex(data[nul + 1 : nul + 21])
        pos = nul + 21


def read_index_dict(f: BinaryIO) -> dict[bytes, bytes]:
    """Read an index file and return it as a dictionary mapping path to sha.

    A later record for the same path overrides an earlier one.
    """
    return dict(read_index(f))


def write_index(f: BinaryIO | _GitFile, entries: Iterable[tuple[bytes, bytes]]) -> None:
    """Write an index file.

    Args:
      f: File-like object to write to
      entries: Iterable over (path, hexsha) tuples
    """
    for path, hexsha in entries:
        f.write(INDEX_MODE + b" " + path + b"\0" + hex_to_sha(hexsha))


def write_index_dict(f: BinaryIO | _GitFile, entries: dict[bytes, bytes]) -> None:
    """Write an index file based on the contents of a dictionary.

    Records are written in the dictionary's iteration order.
    """
    write_index(f, entries.items())


class Index(MutableMapping[bytes, bytes]):
    """A Git staging index: a mapping from tree path to blob sha."""

    def __init__(self, filename: str | os.PathLike[str], read: bool = True) -> None:
        """Create an index object associated with the given filename.

        Args:
          filename: Path to the index file
          read: Whether to initialize the index from the given file, should it
            exist.
        """
        self._filename = os.fspath(filename)
        self._byname: dict[bytes, bytes] = {}
        if read:
            self.read()

    @property
    def path(self) -> str:
        return self._filename

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._filename!r})"

    def write(self) -> None:
        """Write current contents of index to disk, under the index lock."""
        with GitFile(self._filename, "wb") as f:
            write_index_dict(f, self._byname)
        logger.debug("wrote index with %d entries", len(self._byname))

    def read(self) -> None:
        """Read current contents of index from disk.

        A missing index file reads as an empty index.
        """
        self._byname = {}
        try:
            with GitFile(self._filename, "rb") as f:
                self._byname = read_index_dict(f)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise FileReadError(self._filename, exc) from exc

    def __len__(self) -> int:
        """Number of entries in this index file."""
        return len(self._byname)

    def __getitem__(self, path: bytes) -> bytes:
        """Retrieve the sha staged for a path."""
        return self._byname[path]

    def __setitem__(self, path: bytes, hexsha: bytes) -> None:
        if not isinstance(path, bytes):
            raise TypeError(f"index paths must be bytes, not {type(path).__name__}")
        hex_to_sha(hexsha)
        self._byname[path] = hexsha

    def __delitem__(self, path: bytes) -> None:
        del self._byname[path]

    def __iter__(self) -> Iterator[bytes]:
        """Iterate over the paths in this index."""
        return iter(self._byname)

    def __contains__(self, key: object) -> bool:
        return key in self._byname

    def clear(self) -> None:
        """Remove all contents from this index."""
        self._byname = {}

    def commit(self, object_store: DiskObjectStore) -> bytes:
        """Create a new tree from an index.

        Args:
          object_store: Object store to save the tree in
        Returns:
          Root tree SHA
        """
        return commit_tree(object_store, self._byname.items())


class locked_index:
    """Lock the index while making modifications.

    Works as a context manager. The index is re-read after the lock is
    taken, and written back through the lock file on a clean exit.
    """

    _file: _GitFile

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = os.fspath(path)

    def __enter__(self) -> Index:
        self._file = GitFile(self._path, "wb")
        try:
            self._index = Index(self._path)
        except BaseException:
            self._file.abort()
            raise
        return self._index

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: types.TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self._file.abort()
            return
        try:
            write_index_dict(self._file, self._index._byname)
        except BaseException:
            self._file.abort()
            raise
        self._file.close()
        logger.debug("wrote index with %d entries", len(self._index))


def commit_tree(
    object_store: DiskObjectStore, items: Iterable[tuple[bytes, bytes]]
) -> bytes:
    """Commit a flat list of (path, sha) pairs to a single tree object.

    Every path becomes a direct entry of the tree, with the regular file mode.
    Entries are ordered by their serialized bytes, so the same set of
    entries always yields the same tree id.

    Args:
      object_store: Object store to add the tree to
      items: Iterable over (path, hexsha) tuples
    Returns:
      SHA1 of the created tree.
    """
    tree = Tree()
    for path, hexsha in items:
        tree.add(path, DEFAULT_FILE_MODE, hexsha)
    return object_store.add_object(tree)


def blob_from_path(fs_path: str | bytes) -> Blob:
    """Create a blob from the contents of a working tree file.

    Raises:
      FileReadError: if the file cannot be read
    """
    try:
        with open(fs_path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise FileReadError(fs_path, exc) from exc
    blob = Blob()
    blob.data = data
    return blob


def fs_to_tree_path(fs_path: str | bytes) -> bytes:
    """Convert a relative file system path to a git tree path.

    Args:
      fs_path: File system path, relative to the repository root.
    Returns: Git tree path as bytes, with "/" separators
    """
    if not isinstance(fs_path, bytes):
        fs_path = os.fsencode(fs_path)
    sep = os.sep.encode("ascii")
    if sep != b"/":
        fs_path = fs_path.replace(sep, b"/")
    return fs_path


def iter_fs_paths(
    root: str | os.PathLike[str], controldir: str = ".git"
) -> Iterator[str]:
    """Walk the working tree, yielding the paths of regular files.

    Paths are relative to root. Each directory is visited in sorted order.
    The repository control directory and symbolic links are skipped.
    """
    root = os.fspath(root)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d
            for d in dirnames
            if d != controldir and not os.path.islink(os.path.join(dirpath, d))
        )
        for name in sorted(filenames):
            full = os.path.join(dirpath, name)
            if os.path.islink(full) or not os.path.isfile(full):
                continue
            yield os.path.relpath(full, root)
