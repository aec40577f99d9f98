# log_utils.py -- Logging utilities for gitbin
# Copyright (C) 2026 The gitbin Authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# gitbin is dual-licensed under the Apache License, Version 2.0 and the GNU
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

"""Logging set-up for gitbin.

The library never configures logging on its own. Records sent to the
``gitbin`` logger are discarded until an application adds handlers or calls
:func:`default_logging_config`, which is what the ``gitbin`` command does.

``GIT_TRACE`` turns on a debug trace, as it does for git itself: ``1``,
``2`` or ``true`` trace to stderr, an absolute path appends to that file.
Any other value is ignored.
"""

__all__ = [
    "CLI_FORMAT",
    "STDERR",
    "TRACE_FORMAT",
    "default_logging_config",
    "getLogger",
    "remove_null_handler",
    "trace_destination",
]

import logging
import os
import sys

getLogger = logging.getLogger

CLI_FORMAT = "%(levelname)s: %(message)s"
TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

# Sentinel returned by trace_destination() for tracing to stderr.
STDERR = "-"

_GITBIN_LOGGER = getLogger("gitbin")
_NULL_HANDLER = logging.NullHandler()
_GITBIN_LOGGER.addHandler(_NULL_HANDLER)


def trace_destination(value: str | None = None) -> str | None:
    """Work out where a ``GIT_TRACE`` value asks the trace to go.

    Args:
      value: Value to interpret; read from the environment when omitted
    Returns: :data:`STDERR`, an absolute file name, or None when tracing is off
    """
    if value is None:
        value = os.environ.get("GIT_TRACE", "")
    if value.lower() in ("1", "2", "true"):
        return STDERR
    if os.path.isabs(value):
        return value
    return None


def remove_null_handler() -> None:
    """Let records on the ``gitbin`` logger reach the root handlers."""
    _GITBIN_LOGGER.removeHandler(_NULL_HANDLER)


def default_logging_config() -> None:
    """Configure logging for the command line tool.

    Without ``GIT_TRACE``, INFO and above go to stderr as ``LEVEL: message``.
    With it, everything from DEBUG up is written with timestamps and logger
    names. A trace file that cannot be opened is reported and the stderr
    set-up is used instead.
    """
    remove_null_handler()
    destination = trace_destination()
    if destination is None:
        logging.basicConfig(level=logging.INFO, stream=sys.stderr, format=CLI_FORMAT)
    elif destination == STDERR:
        logging.basicConfig(
            level=logging.DEBUG, stream=sys.stderr, format=TRACE_FORMAT
        )
    else:
        try:
            logging.basicConfig(
                level=logging.DEBUG,
                filename=destination,
                filemode="a",
                format=TRACE_FORMAT,
            )
        except OSError as e:
            logging.basicConfig(
                level=logging.INFO, stream=sys.stderr, format=CLI_FORMAT
            )
            _GITBIN_LOGGER.warning("cannot write trace to %s: %s", destination, e)
