# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Reconciling extracted messages with existing template files.

A template file mixes two kinds of entries: entries discovered by
scanning the source (they carry source references) and entries added
by hand (they carry none).  The scanner owns the former completely, so
they always reflect the current source; the latter are never touched.

"""

from __future__ import annotations

import itertools
import logging
import os
from typing import TYPE_CHECKING

from potmerge import _types, po
from potmerge._internals import cli_messages as _msg

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping

__all__ = (
    'DEFAULT_HEADERS',
    'TEMPLATE_COMMENT',
    'TranslatedTemplateEntryError',
    'merge_pot_files',
    'merge_template',
)

logger = logging.getLogger(__name__)

TEMPLATE_COMMENT: tuple[str, ...] = (
    'This file is a PO Template file.',
    '',
    '"msgid"s here are often extracted from source code.',
    'Add new messages manually only if they are dynamic',
    'messages that cannot be statically extracted.',
    '',
    'Run "potmerge extract" to bring this file up to',
    'date.  Leave "msgstr"s empty as changing them here has no',
    'effect: edit them in PO (.po) files instead.',
)
"""The informational comment at the top of every generated template."""

DEFAULT_HEADERS: tuple[str, ...] = (
    'MIME-Version: 1.0',
    'Content-Type: text/plain; charset=UTF-8',
    'Content-Transfer-Encoding: 8bit',
)
"""The header lines of a brand-new template file."""


class TranslatedTemplateEntryError(ValueError):
    """A template entry carries translated text.

    Templates are scaffolds for translations, so any translated text in
    them is a user error that cannot be merged sensibly.

    Attributes:
        msgid:
            The (concatenated) message id of the offending entry.
        filename:
            The template file containing the offending entry, if the
            entry was read from disk.

    """

    def __init__(self, msgid: str, filename: str | None = None) -> None:
        self.msgid = msgid
        self.filename = filename

    def __str__(self) -> str:
        return f'translation with msgid {self.msgid!r} has a non-empty msgstr'


def _check_template_entries(
    entries: Iterable[_types.Entry],
    /,
    *,
    filename: str | None = None,
) -> None:
    for entry in entries:
        if not entry.is_template:
            raise TranslatedTemplateEntryError(entry.key[0], filename)


def merge_template(
    old: _types.Catalog,
    new: _types.Catalog,
    /,
) -> _types.Catalog:
    """Merge freshly extracted messages into an existing template.

    Walk the old entries in order.  Hand-written entries (without
    references) are kept unchanged.  Extracted entries are replaced by
    the new entry of the same identity, or dropped if the message no
    longer occurs in the source.  New entries not matched this way are
    appended in their original order.

    A hand-written entry takes precedence over a new entry with the
    same identity: the new entry is not emitted at all.

    Args:
        old:
            The catalog currently stored on disk.  Supplies the whole
            header block and the obsolete entries of the result.
        new:
            The catalog extracted during this build.

    Returns:
        The merged catalog.

    Raises:
        TranslatedTemplateEntryError:
            An entry on either side carries translated text.

    """
    _check_template_entries(itertools.chain(old.entries, new.entries))
    pending: dict[_types.MessageKey, _types.Entry] = {}
    for entry in new.entries:
        pending.setdefault(entry.key, entry)
    hand_written = {e.key for e in old.entries if not e.is_autogenerated}
    for key in hand_written:
        pending.pop(key, None)

    entries: list[_types.Entry] = []
    for entry in old.entries:
        if not entry.is_autogenerated:
            entries.append(entry)
        elif entry.key in pending:
            entries.append(pending.pop(entry.key))
        else:
            logger.debug(
                _msg.TranslatedString(
                    _msg.DebugMsgTemplate.DROPPING_OBSOLETE_MESSAGE,
                    msgid=entry.key[0],
                )
            )
    for entry in new.entries:
        if entry.key in pending:
            entries.append(pending.pop(entry.key))
    return old._replace(entries=tuple(entries))


def _with_template_comment(catalog: _types.Catalog, /) -> _types.Catalog:
    top = catalog.top_comments
    if top[: len(TEMPLATE_COMMENT)] == TEMPLATE_COMMENT:
        return catalog
    return catalog._replace(top_comments=TEMPLATE_COMMENT + top)


def merge_pot_files(
    existing_paths: Collection[str | os.PathLike],
    extracted: Mapping[str, _types.Catalog],
    /,
    *,
    default_headers: tuple[str, ...] = DEFAULT_HEADERS,
) -> dict[str, str]:
    """Compute the new contents of all changed template files.

    For paths that already exist, the stored template is parsed and
    merged with the extracted catalog (see [`merge_template`][]).  The
    path is omitted from the result if the merged template serializes
    to exactly the stored text.  For paths that do not exist yet, the
    extracted catalog is used as is, with `default_headers` as its
    headers.  Either way, the informational template comment is placed
    at the top of the file.

    All contents are computed before returning, so a failure for any
    one path means no contents at all.

    Args:
        existing_paths:
            The paths of the template files currently on disk.  Paths
            not mentioned in `extracted` are ignored.
        extracted:
            The extracted catalogs, by destination path.
        default_headers:
            The header lines of brand-new template files.

    Returns:
        A mapping of path to file contents, in the order of
        `extracted`, containing only new or changed files.

    Raises:
        TranslatedTemplateEntryError:
            A stored or extracted entry carries translated text.
        po.CatalogFormatError:
            A stored template file is malformed.
        OSError:
            A stored template file could not be read.

    """
    existing = {os.fspath(p) for p in existing_paths}
    result: dict[str, str] = {}
    for path, catalog in extracted.items():
        if os.fspath(path) in existing:
            with open(path, encoding='UTF-8', newline='') as infile:
                original = infile.read()
            stored = po.parse(original, filename=path)
            _check_template_entries(stored.entries, filename=os.fsdecode(path))
            merged = merge_template(stored, catalog)
            contents = po.dump(_with_template_comment(merged))
            if contents == original:
                logger.debug(
                    _msg.TranslatedString(
                        _msg.DebugMsgTemplate.TEMPLATE_FILE_UP_TO_DATE,
                        path=path,
                    )
                )
                continue
        else:
            _check_template_entries(catalog.entries)
            contents = po.dump(
                _with_template_comment(
                    catalog._replace(
                        headers=catalog.headers or default_headers
                    )
                )
            )
        result[path] = contents
    return result
