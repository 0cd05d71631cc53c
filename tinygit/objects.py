# objects.py -- Git object types and their serialization
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

"""Access to base git objects."""

__all__ = [
    "Blob",
    "Commit",
    "DEFAULT_FILE_MODE",
    "ShaFile",
    "Tree",
    "TreeEntry",
    "format_timezone",
    "object_class",
    "object_header",
    "parse_commit_tree",
    "parse_timezone",
    "parse_tree",
    "serialize_tree",
    "split_object",
]

from collections.abc import Iterable, Iterator
from typing import NamedTuple

from .errors import CorruptObject
from .hash import hex_to_sha, hexdigest, sha_to_hex

# Header fields for commits
_TREE_HEADER = b"tree"
_PARENT_HEADER = b"parent"
_AUTHOR_HEADER = b"author"
_COMMITTER_HEADER = b"committer"

# Regular, non-executable file. The only mode this store records.
DEFAULT_FILE_MODE = 0o100644


def object_header(type_name: bytes, length: int) -> bytes:
    """Return an object header for the given type and content length."""
    return type_name + b" " + str(length).encode("ascii") + b"\0"


def split_object(raw: bytes, sha: bytes | None = None) -> tuple[bytes, bytes]:
    """Split the framed form of an object into its type name and body.

    Args:
      raw: Decompressed ``"<kind> <len>\\0<body>"`` bytes
      sha: Object id, used in error messages only
    Returns: Tuple with type name and body
    Raises:
      CorruptObject: if the header is missing or malformed, names an unknown
        object type, or declares a length other than the body's
    """
    header_end = raw.find(b"\0")
    if header_end == -1:
        raise CorruptObject("no header terminator", sha)
    header = raw[:header_end]
    body = raw[header_end + 1 :]
    type_name, _, length_text = header.partition(b" ")
    # Lengths are plain decimal: no sign, no padding, no leading zeros
    if not length_text.isdigit() or (length_text[:1] == b"0" and length_text != b"0"):
        raise CorruptObject(f"malformed header {header!r}", sha)
    length = int(length_text)
    if type_name not in _TYPE_MAP:
        raise CorruptObject(f"unknown object type {type_name!r}", sha)
    if length != len(body):
        raise CorruptObject(
            f"declared length {length} does not match body length {len(body)}", sha
        )
    return type_name, body


def object_class(type_name: bytes) -> "type[ShaFile]":
    """Get the object class corresponding to the given type name.

    Raises:
      KeyError: for unknown type names
    """
    return _TYPE_MAP[type_name]


def serializable_property(name: str, docstring: str | None = None) -> property:
    """A property that invalidates the cached serialization when set."""

    def set(obj: "ShaFile", value: object) -> None:
        setattr(obj, "_" + name, value)
        obj._needs_serialization = True

    def get(obj: "ShaFile") -> object:
        return getattr(obj, "_" + name)

    return property(get, set, doc=docstring)


class ShaFile:
    """A git SHA file."""

    type_name: bytes

    _needs_serialization: bool
    _raw: bytes

    def __init__(self) -> None:
        self._raw = b""
        self._needs_serialization = True

    @classmethod
    def from_raw_string(
        cls, type_name: bytes, body: bytes, sha: bytes | None = None
    ) -> "ShaFile":
        """Create a ShaFile from an object body.

        Args:
          type_name: Type name of the object, e.g. b"blob"
          body: Body of the object, without the header
          sha: Expected object id, if known
        """
        try:
            obj_class = object_class(type_name)
        except KeyError as exc:
            raise CorruptObject(f"unknown object type {type_name!r}", sha) from exc
        obj = obj_class()
        obj._deserialize(body, sha)
        obj._raw = body
        obj._needs_serialization = False
        return obj

    @classmethod
    def from_string(cls, body: bytes) -> "ShaFile":
        """Create an object of this type from its body."""
        return cls.from_raw_string(cls.type_name, body)

    def _deserialize(self, body: bytes, sha: bytes | None) -> None:
        raise NotImplementedError(self._deserialize)

    def _serialize(self) -> bytes:
        raise NotImplementedError(self._serialize)

    def as_raw_string(self) -> bytes:
        """Return the body of this object, without header."""
        if self._needs_serialization:
            self._raw = self._serialize()
            self._needs_serialization = False
        return self._raw

    def as_framed_string(self) -> bytes:
        """Return the header followed by the body, as hashed and stored."""
        raw = self.as_raw_string()
        return object_header(self.type_name, len(raw)) + raw

    @property
    def id(self) -> bytes:
        """The hex SHA of this object."""
        return hexdigest(self.as_framed_string())

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id.decode('ascii')}>"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ShaFile) and self.id == other.id

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash(self.id)


class Blob(ShaFile):
    """A Git Blob object."""

    type_name = b"blob"

    def __init__(self) -> None:
        super().__init__()
        self._data = b""

    def _deserialize(self, body: bytes, sha: bytes | None) -> None:
        self._data = body

    def _serialize(self) -> bytes:
        return self._data

    data = serializable_property("data", "The text contained within the blob object.")


class TreeEntry(NamedTuple):
    """Named tuple encapsulating a single tree entry."""

    path: bytes
    mode: int
    sha: bytes


def _render_entry(path: bytes, mode: int, hexsha: bytes) -> bytes:
    return b"%o %s\0%s" % (mode, path, hex_to_sha(hexsha))


def parse_tree(text: bytes, sha: bytes | None = None) -> Iterator[TreeEntry]:
    """Parse a tree text.

    Args:
      text: Serialized text to parse
      sha: Object id of the tree, used in error messages only
    Returns: iterator of TreeEntry tuples
    Raises:
      CorruptObject: if a record is truncated or its mode is not octal
    """
    count = 0
    length = len(text)
    while count < length:
        mode_end = text.find(b" ", count)
        if mode_end == -1:
            raise CorruptObject("truncated tree entry mode", sha)
        try:
            mode = int(text[count:mode_end], 8)
        except ValueError as exc:
            raise CorruptObject(f"invalid mode {text[count:mode_end]!r}", sha) from exc
        name_end = text.find(b"\0", mode_end)
        if name_end == -1:
            raise CorruptObject("truncated tree entry path", sha)
        name = text[mode_end + 1 : name_end]
        count = name_end + 21
        if count > length:
            raise CorruptObject("truncated tree entry sha", sha)
        yield TreeEntry(name, mode, sha_to_hex(text[name_end + 1 : count]))


def serialize_tree(items: Iterable[tuple[bytes, int, bytes]]) -> list[bytes]:
    """Serialize the items in a tree to a list of records.

    Each record is rendered as ``"<octal mode> <path>\\0<20 byte sha>"`` and
    the records are ordered by comparing them as raw bytes, so the same set
    of entries always serializes the same way.

    Args:
      items: Iterable over (path, mode, hexsha) tuples, in any order
    Returns: Serialized records, sorted
    """
    return sorted(_render_entry(path, mode, hexsha) for path, mode, hexsha in items)


class Tree(ShaFile):
    """A flat Git tree object.

    Every staged path, nested or not, is a direct entry of the tree. No
    subtree objects are created.
    """

    type_name = b"tree"

    def __init__(self) -> None:
        super().__init__()
        self._entries: dict[bytes, tuple[int, bytes]] = {}

    def __contains__(self, path: bytes) -> bool:
        return path in self._entries

    def __getitem__(self, path: bytes) -> tuple[int, bytes]:
        return self._entries[path]

    def __setitem__(self, path: bytes, value: tuple[int, bytes]) -> None:
        mode, hexsha = value
        self._entries[path] = (mode, hexsha)
        self._needs_serialization = True

    def __delitem__(self, path: bytes) -> None:
        del self._entries[path]
        self._needs_serialization = True

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._entries)

    def add(self, path: bytes, mode: int, hexsha: bytes) -> None:
        """Add an entry to the tree, replacing any entry for the same path."""
        self[path] = (mode, hexsha)

    def items(self) -> list[TreeEntry]:
        """Return the entries in the order in which they are serialized."""
        return list(parse_tree(self.as_raw_string()))

    def _deserialize(self, body: bytes, sha: bytes | None) -> None:
        self._entries = {
            path: (mode, hexsha) for path, mode, hexsha in parse_tree(body, sha)
        }

    def _serialize(self) -> bytes:
        return b"".join(
            serialize_tree(
                (path, mode, hexsha) for path, (mode, hexsha) in self._entries.items()
            )
        )

    def as_pretty_string(self) -> str:
        """Render the tree the way ls-tree prints it."""
        return "".join(
            f"{entry.mode:06o} blob {entry.sha.decode('ascii')}\t"
            f"{entry.path.decode('utf-8', 'replace')}\n"
            for entry in self.items()
        )


def parse_timezone(text: bytes) -> int:
    """Parse a timezone text fragment (e.g. b"+0100").

    Returns: offset in seconds east of UTC
    """
    if not text or text[:1] not in b"+-":
        raise ValueError(f"Timezone must start with + or - ({text!r})")
    sign = text[:1]
    offset = int(text[1:])
    hours = offset // 100
    minutes = offset % 100
    seconds = hours * 3600 + minutes * 60
    if sign == b"-":
        return -seconds
    return seconds


def format_timezone(offset: int) -> bytes:
    """Format a timezone for Git serialization.

    Args:
      offset: Timezone offset as seconds east of UTC
    """
    if offset % 60 != 0:
        raise ValueError("Unable to handle non-minute offset.")
    if offset < 0:
        sign = "-"
        offset = -offset
    else:
        sign = "+"
    return f"{sign}{offset // 3600:02d}{(offset // 60) % 60:02d}".encode("ascii")


def _format_person_line(identity: bytes, time: int, timezone: int) -> bytes:
    when = str(time).encode("ascii")
    return identity + b" " + when + b" " + format_timezone(timezone)


def _parse_person_line(value: bytes, sha: bytes | None) -> tuple[bytes, int, int]:
    try:
        identity, time_text, timezone_text = value.rsplit(b" ", 2)
        return identity, int(time_text), parse_timezone(timezone_text)
    except ValueError as exc:
        raise CorruptObject(f"malformed identity line {value!r}", sha) from exc


def parse_commit_tree(body: bytes) -> bytes | None:
    """Return the tree id named on the first line of a commit body.

    Returns None when the first line is not a ``tree`` header.
    """
    first_line = body.split(b"\n", 1)[0]
    prefix = _TREE_HEADER + b" "
    if not first_line.startswith(prefix):
        return None
    return first_line[len(prefix) :].strip()


class Commit(ShaFile):
    """A git commit object."""

    type_name = b"commit"

    def __init__(self) -> None:
        super().__init__()
        self._tree = b""
        self._parents: list[bytes] = []
        self._author = b""
        self._author_time = 0
        self._author_timezone = 0
        self._committer = b""
        self._commit_time = 0
        self._commit_timezone = 0
        self._message = b""
        self._extra: list[tuple[bytes, bytes]] = []

    def _deserialize(self, body: bytes, sha: bytes | None) -> None:
        headers, sep, message = body.partition(b"\n\n")
        if not sep and headers.endswith(b"\n"):
            headers = headers[:-1]
        self._message = message
        seen_tree = False
        for line in headers.split(b"\n"):
            field, _, value = line.partition(b" ")
            if field == _TREE_HEADER:
                self._tree = value
                seen_tree = True
            elif field == _PARENT_HEADER:
                self._parents.append(value)
            elif field == _AUTHOR_HEADER:
                (
                    self._author,
                    self._author_time,
                    self._author_timezone,
                ) = _parse_person_line(value, sha)
            elif field == _COMMITTER_HEADER:
                (
                    self._committer,
                    self._commit_time,
                    self._commit_timezone,
                ) = _parse_person_line(value, sha)
            else:
                self._extra.append((field, value))
        if not seen_tree:
            raise CorruptObject("commit has no tree", sha)

    def _serialize(self) -> bytes:
        chunks = [_TREE_HEADER + b" " + self._tree + b"\n"]
        for parent in self._parents:
            chunks.append(_PARENT_HEADER + b" " + parent + b"\n")
        chunks.append(
            _AUTHOR_HEADER
            + b" "
            + _format_person_line(
                self._author, self._author_time, self._author_timezone
            )
            + b"\n"
        )
        chunks.append(
            _COMMITTER_HEADER
            + b" "
            + _format_person_line(
                self._committer, self._commit_time, self._commit_timezone
            )
            + b"\n"
        )
        for field, value in self._extra:
            chunks.append(field + b" " + value + b"\n")
        chunks.append(b"\n")
        chunks.append(self._message)
        return b"".join(chunks)

    tree = serializable_property("tree", "Tree that is the state of this commit")
    parents = serializable_property(
        "parents", "Parents of this commit, by their SHA1."
    )
    author = serializable_property("author", "The name and email of the author")
    author_time = serializable_property(
        "author_time", "Seconds since the epoch at which the change was made"
    )
    author_timezone = serializable_property(
        "author_timezone", "Offset east of UTC of the author's timezone"
    )
    committer = serializable_property(
        "committer", "The name and email of the committer"
    )
    commit_time = serializable_property(
        "commit_time", "Seconds since the epoch at which the commit was created"
    )
    commit_timezone = serializable_property(
        "commit_timezone", "Offset east of UTC of the committer's timezone"
    )
    message = serializable_property("message", "The commit message")


OBJECT_CLASSES = (Commit, Tree, Blob)

_TYPE_MAP: dict[bytes, type[ShaFile]] = {cls.type_name: cls for cls in OBJECT_CLASSES}
