# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from testservers.log import setup_logging

# Request and teardown debug lines follow TESTSERVERS_LOG_LEVEL during the test session.
setup_logging()
