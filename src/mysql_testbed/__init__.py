# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

"""Local MySQL test servers for the binlog client test suite.

The harness starts pre-built MySQL containers with the bundled server
configurations under ``conf/``, waits for their published port to accept
connections, and decodes binlog files with the image's ``mysqlbinlog``.
"""

from .readiness import InvalidInput, ReadinessTimeout, WaitCancelled, wait_until_ready

__all__: list[str] = ["InvalidInput", "ReadinessTimeout", "WaitCancelled", "wait_until_ready"]
