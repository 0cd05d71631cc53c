# config.py -- Reading and writing repository configuration
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

"""Reading and writing Git configuration files.

Only the subset of the git-config syntax this project needs is supported:
section headers with optional quoted subsections, ``name = value`` lines,
comments, quoting and the common backslash escapes. Section and variable
names are case-insensitive.
"""

__all__ = [
    "ConfigFile",
    "Section",
]

import os
from collections.abc import Iterator
from typing import IO

from .errors import FileReadError
from .file import GitFile, _GitFile

Section = tuple[bytes, ...]

_ESCAPE_TABLE = {
    ord(b"\\"): ord(b"\\"),
    ord(b'"'): ord(b'"'),
    ord(b"n"): ord(b"\n"),
    ord(b"t"): ord(b"\t"),
    ord(b"b"): ord(b"\b"),
}
_COMMENT_CHARS = [ord(b"#"), ord(b";")]
_WHITESPACE_CHARS = [ord(b"\t"), ord(b" ")]


def _to_bytes(value: str | bytes, encoding: str = "utf-8") -> bytes:
    if isinstance(value, str):
        return value.encode(encoding)
    return value


_ESCAPES_OUT = [
    (b"\\", b"\\\\"),
    (b"\n", b"\\n"),
    (b"\t", b"\\t"),
    (b'"', b'\\"'),
]


def _escape_value(value: bytes) -> bytes:
    for char, escaped in _ESCAPES_OUT:
        value = value.replace(char, escaped)
    return value


def _format_string(value: bytes) -> bytes:
    """Render a value so that _parse_string gives it back unchanged."""
    escaped = _escape_value(value)
    if value != value.strip(b" \t") or b"#" in value or b";" in value:
        return b'"' + escaped + b'"'
    return escaped


def _parse_string(value: bytes) -> bytes:
    """Unquote and unescape a raw value, dropping any trailing comment."""
    raw = value.strip()
    out = bytearray()
    # Unquoted whitespace only survives if more text follows it
    pending = bytearray()
    quoted = False
    i = 0
    while i < len(raw):
        c = raw[i]
        i += 1
        if c == ord(b'"'):
            quoted = not quoted
            continue
        if not quoted and c in _COMMENT_CHARS:
            break
        if not quoted and c in _WHITESPACE_CHARS:
            pending.append(c)
            continue
        out += pending
        pending.clear()
        if c == ord(b"\\") and i < len(raw) and raw[i] in _ESCAPE_TABLE:
            out.append(_ESCAPE_TABLE[raw[i]])
            i += 1
        else:
            out.append(c)
    if quoted:
        raise ValueError("missing end quote")
    return bytes(out)


def _check_variable_name(name: bytes) -> bool:
    if not name or not name[:1].isalpha():
        return False
    return all(c.isalnum() or c == "-" for c in name.decode("ascii", "replace"))


def _check_section_name(name: bytes) -> bool:
    if not name:
        return False
    return all(c.isalnum() or c in "-." for c in name.decode("ascii", "replace"))


def _strip_comments(line: bytes) -> bytes:
    quoted = False
    for i, c in enumerate(line):
        if c == ord(b'"'):
            quoted = not quoted
        elif c in _COMMENT_CHARS and not quoted:
            return line[:i]
    return line


def _parse_section_header_line(line: bytes) -> tuple[Section, bytes]:
    """Split ``[name "sub"] rest`` into the section tuple and the rest."""
    header, found, rest = _strip_comments(line).rstrip()[1:].partition(b"]")
    if not found:
        raise ValueError("expected trailing ]")
    name, has_sub, subsection = header.partition(b" ")
    if not _check_section_name(name):
        raise ValueError(f"invalid section name {name!r}")
    if not has_sub:
        return (name,), rest
    subsection = subsection.strip()
    if len(subsection) < 2 or subsection[:1] != b'"' or subsection[-1:] != b'"':
        raise ValueError(f"invalid subsection {subsection!r}")
    return (name, subsection[1:-1]), rest


def _section_key(section: Section) -> Section:
    return (section[0].lower(),) + tuple(section[1:])


class ConfigFile:
    """A Git configuration file, like .git/config."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self.path: str | None = None
        self._sections: dict[Section, Section] = {}
        self._values: dict[Section, dict[bytes, tuple[bytes, bytes]]] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ConfigFile) and other._values == self._values

    def _check_section_and_name(
        self, section: Section | bytes | str, name: str | bytes
    ) -> tuple[Section, bytes]:
        if not isinstance(section, tuple):
            section = (section,)
        checked = tuple(_to_bytes(part, self.encoding) for part in section)
        return checked, _to_bytes(name, self.encoding)

    def get(self, section: Section | bytes | str, name: str | bytes) -> bytes:
        """Look up a value; section and variable names match case-insensitively.

        Raises:
          KeyError: if the value is not set
        """
        section, name = self._check_section_and_name(section, name)
        return self._values[_section_key(section)][name.lower()][1]

    def set(
        self,
        section: Section | bytes | str,
        name: str | bytes,
        value: str | bytes,
    ) -> None:
        """Store a value, replacing any earlier one for the same name.

        Args:
          section: Section name, or a (name, subsection) tuple
          name: Variable name, e.g. ``email`` in ``user.email``
          value: New value
        Raises:
          ValueError: if the section or variable name is malformed
        """
        section, name = self._check_section_and_name(section, name)
        if not _check_section_name(section[0]):
            raise ValueError(f"invalid section name {section[0]!r}")
        if not _check_variable_name(name):
            raise ValueError(f"invalid variable name {name!r}")
        key = _section_key(section)
        self._sections.setdefault(key, section)
        self._values.setdefault(key, {})[name.lower()] = (
            name,
            _to_bytes(value, self.encoding),
        )

    def sections(self) -> Iterator[Section]:
        """Iterate over the sections, as written."""
        return iter(self._sections.values())

    def items(self, section: Section | bytes | str) -> Iterator[tuple[bytes, bytes]]:
        """Iterate over the (name, value) pairs of a section."""
        section, _ = self._check_section_and_name(section, b"")
        return iter(self._values.get(_section_key(section), {}).values())

    @classmethod
    def from_file(cls, f: IO[bytes]) -> "ConfigFile":
        """Read configuration from a file-like object.

        Raises:
          ValueError: if the file is not valid configuration syntax
        """
        ret = cls()
        section: Section | None = None
        for lineno, line in enumerate(f.readlines()):
            if lineno == 0 and line.startswith(b"\xef\xbb\xbf"):
                line = line[3:]
            line = line.lstrip()
            if line[:1] == b"[":
                section, line = _parse_section_header_line(line)
                key = _section_key(section)
                ret._sections.setdefault(key, section)
                ret._values.setdefault(key, {})
            if _strip_comments(line).strip() == b"":
                continue
            if section is None:
                raise ValueError(f"setting {line!r} without section")
            setting, has_value, value = line.partition(b"=")
            setting = setting.strip()
            if not _check_variable_name(setting):
                raise ValueError(f"invalid variable name {setting!r}")
            # A bare name is shorthand for "name = true"
            parsed = _parse_string(value) if has_value else b"true"
            ret._values[_section_key(section)][setting.lower()] = (setting, parsed)
        return ret

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "ConfigFile":
        """Read configuration from a file on disk.

        Raises:
          FileNotFoundError: if the file does not exist
          FileReadError: if the file cannot be read or parsed
        """
        path = os.fspath(path)
        try:
            with GitFile(path, "rb") as f:
                ret = cls.from_file(f)
        except FileNotFoundError:
            raise
        except (OSError, ValueError) as exc:
            raise FileReadError(path, exc) from exc
        ret.path = path
        return ret

    def write_to_path(self, path: str | os.PathLike[str] | None = None) -> None:
        """Write configuration to a file on disk, under its lock file."""
        if path is None:
            if self.path is None:
                raise ValueError("No path specified and no default path available")
            path = self.path
        with GitFile(path, "wb") as f:
            self.write_to_file(f)

    def write_to_file(self, f: IO[bytes] | _GitFile) -> None:
        """Write configuration to a file-like object."""
        for key, section in self._sections.items():
            if len(section) == 1:
                f.write(b"[" + section[0] + b"]\n")
            else:
                f.write(b"[" + section[0] + b' "' + section[1] + b'"]\n')
            for name, value in self._values[key].values():
                f.write(b"\t" + name + b" = " + _format_string(value) + b"\n")
