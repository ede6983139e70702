# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Helper functions for the potmerge command-line.

Warning:
    Non-public module (implementation detail), provided for didactical and
    educational purposes only. Subject to change without notice, including
    removal.

"""

from __future__ import annotations

import copy
import logging
import os
import pathlib
import sys
from typing import TYPE_CHECKING, cast

from potmerge import _types
from potmerge._internals import cli_messages as _msg

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

if TYPE_CHECKING:
    from collections.abc import Mapping

PROG_NAME = _msg.PROG_NAME
PYPROJECT_FILENAME = 'pyproject.toml'

DEFAULT_CONFIG: _types.ProjectConfig = {
    'source-dirs': ['.'],
    'output-dir': 'locale',
    'default-domain': 'messages',
    'exclude': [],
    'comment-tags': ['TRANSLATORS:'],
    'jobs': 1,
}
"""The effective settings if the project configures nothing."""


def config_filename(
    explicit: str | os.PathLike | None = None,
) -> tuple[pathlib.Path, bool]:
    """Return the filename of the project configuration file.

    The file is the one given explicitly, else the one named by the
    `POTMERGE_CONFIG` environment variable, else `pyproject.toml` in
    the current directory.

    Returns:
        A 2-tuple of the filename, and whether the file was requested
        explicitly.  An explicitly requested file must exist.

    """
    if explicit is not None:
        return pathlib.Path(explicit), True
    env_value = os.getenv(PROG_NAME.upper() + '_CONFIG')
    if env_value:
        return pathlib.Path(env_value), True
    return pathlib.Path(PYPROJECT_FILENAME), False


def load_project_config(
    explicit: str | os.PathLike | None = None,
) -> _types.ProjectConfig:
    """Load the project configuration.

    A file named `pyproject.toml` contributes its `[tool.potmerge]`
    table; any other configuration file is the table itself.  A missing
    `pyproject.toml` is the same as an empty configuration, unless the
    file was requested explicitly.  The filename is obtained via
    [`config_filename`][].

    Returns:
        The project configuration, with defaults for all unset
        settings.  See [`_types.ProjectConfig`][] for details.

    Raises:
        OSError:
            There was an OS error accessing the file.
        tomllib.TOMLDecodeError:
            The file is not valid TOML.
        TypeError:
            The configuration has a setting of the wrong type.
        ValueError:
            The configuration has an unknown setting, or a setting with
            a disallowed value.

    """
    filename, required = config_filename(explicit)
    try:
        with open(os.fspath(filename), 'rb') as fileobj:
            data = tomllib.load(fileobj)
    except FileNotFoundError:
        if required:
            raise
        return copy.deepcopy(DEFAULT_CONFIG)
    logger = logging.getLogger(PROG_NAME)
    logger.debug(
        _msg.TranslatedString(
            _msg.DebugMsgTemplate.LOADED_CONFIG, filename=str(filename)
        )
    )
    if filename.name == PYPROJECT_FILENAME:
        data = data.get('tool', {}).get(PROG_NAME, {})
    _types.validate_project_config(data)
    return cast(
        '_types.ProjectConfig', {**copy.deepcopy(DEFAULT_CONFIG), **data}
    )


def normalize_catalog(catalog: _types.Catalog, /) -> _types.Catalog:
    """Put an extracted catalog into a deterministic order.

    Sort each entry's references by filename and line number, then
    order the entries by their first reference.  Scanning source files
    in parallel records references in an unpredictable order; this
    undoes that.

    """

    def reference_key(ref: _types.Reference, /) -> tuple[str, int]:
        return (ref.filename, ref.lineno if ref.lineno is not None else 0)

    entries = [
        entry._replace(
            references=tuple(sorted(entry.references, key=reference_key))
        )
        for entry in catalog.entries
    ]
    entries.sort(
        key=lambda e: (
            reference_key(e.references[0]) if e.references else ('', 0)
        )
    )
    return catalog._replace(entries=tuple(entries))


def write_files(contents: Mapping[str, str], /) -> None:
    """Write each file, creating parent directories as necessary.

    Existing files are overwritten.

    Raises:
        OSError:
            There was an OS error writing a file.

    """
    logger = logging.getLogger(PROG_NAME)
    for path, text in contents.items():
        filename = pathlib.Path(path)
        filename.parent.mkdir(parents=True, exist_ok=True)
        with filename.open('w', encoding='UTF-8', newline='') as outfile:
            outfile.write(text)
        logger.info(
            _msg.TranslatedString(
                _msg.InfoMsgTemplate.WROTE_TEMPLATE_FILE, path=path
            )
        )
