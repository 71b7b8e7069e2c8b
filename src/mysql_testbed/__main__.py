# SPDX-FileCopyrightText: 2025 Blackcat Informatics® Inc.
# SPDX-License-Identifier: MIT

import sys

from .cli import main

sys.exit(main(["mysql-testbed", *sys.argv[1:]]))
