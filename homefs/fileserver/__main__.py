# SPDX-FileCopyrightText: 2026 - Canonical Ltd
# SPDX-License-Identifier: Apache-2.0

from homefs.fileserver.server import main

if __name__ == "__main__":
    main()
