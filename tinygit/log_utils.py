# log_utils.py -- Logging setup for tinygit
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

"""Logging utilities for tinygit.

tinygit is used as a library as well as from its command line, so the
package logger carries a handler that drops every record until the caller
configures logging. Modules only need getLogger, which this module
re-exports for convenience.

Setting GIT_TRACE turns on debug output for the command line:

- "1", "2" or "true" trace to stderr
- an integer from 3 to 9 traces to that file descriptor
- an absolute path traces to that file, or to one file per process when
  the path is a directory
"""

__all__ = [
    "default_logging_config",
    "getLogger",
    "remove_null_handler",
]

import logging
import os
import sys

getLogger = logging.getLogger

TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

_NULL_HANDLER = logging.NullHandler()
_TINYGIT_LOGGER = getLogger("tinygit")
_TINYGIT_LOGGER.addHandler(_NULL_HANDLER)


def _get_trace_target() -> str | int | None:
    """Decode GIT_TRACE.

    Returns:
        None when tracing is off, 2 for stderr, a file descriptor from 3 to
        9, or an absolute file or directory path.
    """
    raw = os.environ.get("GIT_TRACE", "")
    value = raw.lower()
    if value in ("", "0", "false"):
        return None
    if value in ("1", "2", "true"):
        return 2
    if value.isdigit():
        fd = int(value)
        return fd if 3 <= fd <= 9 else None
    return raw if os.path.isabs(raw) else None


def _open_trace_handler(target: str | int) -> logging.Handler:
    if target == 2:
        return logging.StreamHandler(sys.stderr)
    if isinstance(target, int):
        return logging.StreamHandler(os.fdopen(target, "w", buffering=1))
    if os.path.isdir(target):
        target = os.path.join(target, f"trace.{os.getpid()}")
    return logging.FileHandler(target, mode="a")


def _configure_logging_from_trace() -> bool:
    """Send debug logging to the GIT_TRACE target.

    Returns whether tracing was switched on. A target that cannot be opened
    is reported on stderr and leaves logging alone.
    """
    target = _get_trace_target()
    if target is None:
        return False
    try:
        handler = _open_trace_handler(target)
    except OSError as e:
        sys.stderr.write(f"Warning: Failed to open GIT_TRACE target {target}: {e}\n")
        return False
    handler.setFormatter(logging.Formatter(TRACE_FORMAT))
    logging.basicConfig(level=logging.DEBUG, handlers=[handler])
    return True


def default_logging_config() -> None:
    """Configure logging for the command line.

    Honours GIT_TRACE, and otherwise logs plain messages at INFO to stderr.
    """
    remove_null_handler()
    if not _configure_logging_from_trace():
        logging.basicConfig(level=logging.INFO, stream=sys.stderr, format="%(message)s")


def remove_null_handler() -> None:
    """Let tinygit records reach whatever handlers the application set up."""
    _TINYGIT_LOGGER.removeHandler(_NULL_HANDLER)
