# hash.py -- Object hashing and compression
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

"""Object hashing and compression.

Object ids are SHA-1 digests of the framed object bytes. Externally they are
rendered as 40 lowercase hex characters, which is also how they name loose
object files. Loose objects are stored zlib-compressed.
"""

__all__ = [
    "HEX_LENGTH",
    "OID_LENGTH",
    "compress",
    "decompress",
    "digest",
    "hex_to_filename",
    "hex_to_sha",
    "hexdigest",
    "sha_to_hex",
    "valid_hexsha",
]

import binascii
import os
import zlib
from hashlib import sha1

from .errors import CorruptObject

OID_LENGTH = 20
HEX_LENGTH = 40


def digest(data: bytes) -> bytes:
    """Hash data and return the 20-byte binary digest."""
    return sha1(data).digest()


def hexdigest(data: bytes) -> bytes:
    """Hash data and return the 40-byte hex digest."""
    return sha1(data).hexdigest().encode("ascii")


def sha_to_hex(sha: bytes) -> bytes:
    """Takes a binary sha and returns its hex form."""
    if len(sha) != OID_LENGTH:
        raise ValueError(f"Incorrect length of sha1 string: {len(sha)}")
    return binascii.hexlify(sha)


def hex_to_sha(hex: bytes | str) -> bytes:
    """Takes a hex sha and returns a binary sha."""
    if len(hex) != HEX_LENGTH:
        raise ValueError(f"Incorrect length of hexsha: {hex!r}")
    try:
        return binascii.unhexlify(hex)
    except binascii.Error as exc:
        raise ValueError(f"Invalid hexsha: {hex!r}") from exc


def valid_hexsha(hex: bytes | str) -> bool:
    """Check whether hex is a well-formed 40 character hex sha."""
    if len(hex) != HEX_LENGTH:
        return False
    try:
        binascii.unhexlify(hex)
    except (TypeError, binascii.Error):
        return False
    return True


def hex_to_filename(path: str, hex: bytes) -> str:
    """Takes a hex sha and returns its filename relative to the given path.

    The first two hex digits name a subdirectory, the remaining 38 the file.
    """
    hex_str = hex.decode("ascii")
    return os.path.join(path, hex_str[:2], hex_str[2:])


def compress(data: bytes) -> bytes:
    """Compress object bytes with zlib."""
    return zlib.compress(data)


def decompress(data: bytes) -> bytes:
    """Decompress a zlib stream.

    Raises:
      CorruptObject: if the stream header or checksum is invalid, the stream
        is cut short, or data follows the end of the stream
    """
    dcomp = zlib.decompressobj()
    try:
        result = dcomp.decompress(data)
        result += dcomp.flush()
    except zlib.error as exc:
        raise CorruptObject(f"decompression failed: {exc}") from exc
    if not dcomp.eof:
        raise CorruptObject("truncated compressed stream")
    if dcomp.unused_data:
        raise CorruptObject("trailing garbage after compressed stream")
    return result
