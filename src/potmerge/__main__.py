# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib
"""Run [`potmerge.cli.potmerge`][] on import."""

import sys

if __name__ == '__main__':
    from potmerge.cli import potmerge

    sys.exit(potmerge())
