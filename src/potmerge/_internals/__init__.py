# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""potmerge internals.

Warning:
    Non-public package (implementation detail). Subject to change
    without notice, including removal.

"""

import potmerge

__all__ = ()

PROG_NAME = potmerge.__distribution_name__
VERSION = potmerge.__version__
