# tests/test_config.py -- Tests for reading and writing configuration files
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

"""Tests for reading and writing configuration files."""

import os
from io import BytesIO

from tinygit.config import ConfigFile
from tinygit.errors import FileReadError

from . import TestCase
from .utils import make_temp_dir


class ConfigFileTests(TestCase):
    def from_file(self, text: bytes) -> ConfigFile:
        return ConfigFile.from_file(BytesIO(text))

    def test_empty(self) -> None:
        ConfigFile()

    def test_eq(self) -> None:
        self.assertEqual(ConfigFile(), ConfigFile())

    def test_default_config(self) -> None:
        cf = self.from_file(
            b"""[core]
\trepositoryformatversion = 0
\tfilemode = true
\tbare = false
\tlogallrefupdates = true
"""
        )
        self.assertEqual(b"0", cf.get((b"core",), b"repositoryformatversion"))
        self.assertEqual(b"false", cf.get((b"core",), b"bare"))
        self.assertEqual(b"true", cf.get((b"core",), b"filemode"))
        self.assertEqual([(b"core",)], list(cf.sections()))

    def test_from_file_empty(self) -> None:
        cf = self.from_file(b"")
        self.assertEqual(ConfigFile(), cf)

    def test_empty_line_before_section(self) -> None:
        cf = self.from_file(b"\n[section]\n")
        self.assertEqual([(b"section",)], list(cf.sections()))

    def test_comment_before_section(self) -> None:
        cf = self.from_file(b"# foo\n[section]\n")
        self.assertEqual([(b"section",)], list(cf.sections()))

    def test_comment_after_section(self) -> None:
        cf = self.from_file(b"[section] # foo\n")
        self.assertEqual([(b"section",)], list(cf.sections()))

    def test_comment_after_variable(self) -> None:
        cf = self.from_file(b"[section]\nbar= foo # a comment\n")
        self.assertEqual(b"foo", cf.get((b"section",), b"bar"))

    def test_comment_character_within_value_string(self) -> None:
        cf = self.from_file(b'[section]\nvalue = "foo#bar"\n')
        self.assertEqual(b"foo#bar", cf.get((b"section",), b"value"))

    def test_quoted_whitespace(self) -> None:
        cf = self.from_file(b'[user]\n\tname = "  Spaced Out "\n')
        self.assertEqual(b"  Spaced Out ", cf.get((b"user",), b"name"))

    def test_escapes(self) -> None:
        cf = self.from_file(b'[section]\nvalue = a\\tb\\"c\\\\d\n')
        self.assertEqual(b'a\tb"c\\d', cf.get((b"section",), b"value"))

    def test_missing_end_quote(self) -> None:
        self.assertRaises(ValueError, self.from_file, b'[section]\nvalue = "foo\n')

    def test_from_file_with_mixed_quoted(self) -> None:
        cf = self.from_file(b'[core]\nfoo = "bar"la\n')
        self.assertEqual(b"barla", cf.get((b"core",), b"foo"))

    def test_boolean_shorthand(self) -> None:
        cf = self.from_file(b"[core]\nbare\n")
        self.assertEqual(b"true", cf.get((b"core",), b"bare"))

    def test_subsection(self) -> None:
        cf = self.from_file(b'[branch "main"]\nremote = origin\n')
        self.assertEqual(b"origin", cf.get((b"branch", b"main"), b"remote"))
        self.assertEqual([(b"branch", b"main")], list(cf.sections()))

    def test_case_insensitive(self) -> None:
        cf = self.from_file(b"[User]\n\tEMail = jane@example.com\n")
        self.assertEqual(b"jane@example.com", cf.get((b"user",), b"email"))
        self.assertEqual(b"jane@example.com", cf.get("USER", "Email"))
        self.assertEqual([(b"EMail", b"jane@example.com")], list(cf.items("user")))

    def test_missing_key(self) -> None:
        cf = self.from_file(b"[user]\nname = Jane\n")
        self.assertRaises(KeyError, cf.get, (b"user",), b"email")
        self.assertRaises(KeyError, cf.get, (b"core",), b"bare")

    def test_setting_without_section(self) -> None:
        self.assertRaises(ValueError, self.from_file, b"foo = bar\n")

    def test_invalid_variable_name(self) -> None:
        self.assertRaises(ValueError, self.from_file, b"[core]\n1foo = bar\n")

    def test_invalid_section_name(self) -> None:
        self.assertRaises(ValueError, self.from_file, b"[foo bar\n")
        self.assertRaises(ValueError, self.from_file, b"[f_o]\n")

    def test_bom(self) -> None:
        cf = self.from_file(b"\xef\xbb\xbf[core]\nbare = false\n")
        self.assertEqual(b"false", cf.get((b"core",), b"bare"))

    def test_set(self) -> None:
        cf = ConfigFile()
        cf.set("user", "name", "Jane")
        cf.set((b"user",), b"NAME", b"John")
        self.assertEqual(b"John", cf.get("user", "name"))
        self.assertRaises(ValueError, cf.set, "user", "bad_name", "x")
        self.assertRaises(ValueError, cf.set, "us er", "name", "x")

    def test_write_to_file(self) -> None:
        cf = ConfigFile()
        cf.set((b"core",), b"bare", b"false")
        cf.set((b"user",), b"name", b" Jane ")
        cf.set((b"branch", b"main"), b"remote", b"origin")
        f = BytesIO()
        cf.write_to_file(f)
        self.assertEqual(
            b'[core]\n\tbare = false\n[user]\n\tname = " Jane "\n'
            b'[branch "main"]\n\tremote = origin\n',
            f.getvalue(),
        )
        f.seek(0)
        self.assertEqual(cf, ConfigFile.from_file(f))


class ConfigPathTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.path = os.path.join(make_temp_dir(self), "config")

    def test_missing(self) -> None:
        self.assertRaises(FileNotFoundError, ConfigFile.from_path, self.path)

    def test_write_read(self) -> None:
        cf = ConfigFile()
        cf.set("user", "email", "jane@example.com")
        cf.write_to_path(self.path)
        self.assertFalse(os.path.exists(self.path + ".lock"))
        reread = ConfigFile.from_path(self.path)
        self.assertEqual(self.path, reread.path)
        self.assertEqual(b"jane@example.com", reread.get("user", "email"))
        reread.set("user", "name", "Jane")
        reread.write_to_path()
        self.assertEqual(b"Jane", ConfigFile.from_path(self.path).get("user", "name"))

    def test_write_without_path(self) -> None:
        self.assertRaises(ValueError, ConfigFile().write_to_path)

    def test_invalid_syntax(self) -> None:
        with open(self.path, "wb") as f:
            f.write(b"no section = here\n")
        self.assertRaises(FileReadError, ConfigFile.from_path, self.path)
