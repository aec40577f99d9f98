# test_log_utils.py -- Tests for log_utils.py
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


"""Tests for gitbin.log_utils."""

import logging
import os

from gitbin.log_utils import (
    _GITBIN_LOGGER,
    _NULL_HANDLER,
    STDERR,
    default_logging_config,
    getLogger,
    remove_null_handler,
    trace_destination,
)

from . import TestCase


class TraceDestinationTests(TestCase):
    def test_unset(self) -> None:
        self.assertIsNone(trace_destination())

    def test_disabled(self) -> None:
        for value in ["", "0", "false", "FALSE", "3", "9", "relative/path"]:
            self.assertIsNone(trace_destination(value), value)

    def test_stderr(self) -> None:
        for value in ["1", "2", "true", "TRUE"]:
            self.assertEqual(STDERR, trace_destination(value), value)

    def test_path(self) -> None:
        trace_file = os.path.join(self.make_temp_dir(), "trace.log")
        self.assertEqual(trace_file, trace_destination(trace_file))

    def test_environment(self) -> None:
        self.overrideEnv("GIT_TRACE", "true")
        self.assertEqual(STDERR, trace_destination())
        self.overrideEnv("GIT_TRACE", "0")
        self.assertIsNone(trace_destination())


class LogUtilsTests(TestCase):
    """Tests for log_utils."""

    def setUp(self) -> None:
        super().setUp()
        self.original_handlers = list(_GITBIN_LOGGER.handlers)
        root_logger = logging.getLogger()
        self.original_root_handlers = list(root_logger.handlers)
        self.original_root_level = root_logger.level
        root_logger.handlers = []
        root_logger.level = logging.WARNING

    def tearDown(self) -> None:
        _GITBIN_LOGGER.handlers = self.original_handlers
        root_logger = logging.getLogger()
        for handler in root_logger.handlers:
            if handler not in self.original_root_handlers:
                handler.close()
        root_logger.handlers = self.original_root_handlers
        root_logger.level = self.original_root_level
        super().tearDown()

    def test_null_handler(self) -> None:
        self.assertIsInstance(_NULL_HANDLER, logging.NullHandler)
        self.assertIn(_NULL_HANDLER, self.original_handlers)

    def test_get_logger(self) -> None:
        logger = getLogger("gitbin.test")
        self.assertIsInstance(logger, logging.Logger)
        self.assertEqual("gitbin.test", logger.name)

    def test_remove_null_handler(self) -> None:
        remove_null_handler()
        self.assertNotIn(_NULL_HANDLER, _GITBIN_LOGGER.handlers)
        remove_null_handler()

    def test_default_logging_config(self) -> None:
        default_logging_config()
        self.assertNotIn(_NULL_HANDLER, _GITBIN_LOGGER.handlers)
        root_logger = logging.getLogger()
        self.assertEqual(1, len(root_logger.handlers))
        self.assertEqual(logging.INFO, root_logger.level)
        self.assertEqual(
            "WARNING: bad pack",
            root_logger.handlers[0].format(
                logging.makeLogRecord(
                    {
                        "levelno": logging.WARNING,
                        "levelname": "WARNING",
                        "msg": "bad pack",
                    }
                )
            ),
        )

    def test_with_trace(self) -> None:
        self.overrideEnv("GIT_TRACE", "1")
        default_logging_config()
        root_logger = logging.getLogger()
        self.assertNotIn(_NULL_HANDLER, _GITBIN_LOGGER.handlers)
        self.assertEqual(1, len(root_logger.handlers))
        self.assertEqual(logging.DEBUG, root_logger.level)

    def test_trace_file(self) -> None:
        trace_file = os.path.join(self.make_temp_dir(), "trace.log")
        with open(trace_file, "w") as f:
            f.write("earlier\n")
        self.overrideEnv("GIT_TRACE", trace_file)
        default_logging_config()
        getLogger("gitbin.test").debug("reading pack %s", "pack-1234")
        for handler in logging.getLogger().handlers:
            handler.flush()
        with open(trace_file) as f:
            contents = f.read()
        self.assertTrue(contents.startswith("earlier\n"))
        self.assertIn("gitbin.test DEBUG: reading pack pack-1234", contents)

    def test_unwritable_trace_file(self) -> None:
        tmpdir = self.make_temp_dir()
        self.overrideEnv("GIT_TRACE", tmpdir)
        with self.assertLogs("gitbin", level="WARNING") as cm:
            default_logging_config()
        self.assertEqual(1, len(cm.output))
        self.assertIn(f"cannot write trace to {tmpdir}", cm.output[0])
        self.assertEqual(logging.INFO, logging.getLogger().level)
        self.assertEqual([], os.listdir(tmpdir))
