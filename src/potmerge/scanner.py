# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Finding translatable messages in Python source files.

Tokenizing is done by Babel's Python extractor.  Every message found is
recorded with the [`ExtractionSession`][potmerge.extractor.ExtractionSession]
under the template file of its message domain.

"""

from __future__ import annotations

import errno
import fnmatch
import logging
import os
import pathlib
from typing import TYPE_CHECKING

from babel.messages import extract

from potmerge import _types
from potmerge._internals import cli_messages as _msg

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from potmerge import extractor

__all__ = ('KEYWORDS', 'find_source_files', 'scan_file', 'template_path')

logger = logging.getLogger(__name__)

KEYWORDS: dict[str, tuple[int | None, int, int | None]] = {
    '_': (None, 0, None),
    'gettext': (None, 0, None),
    'N_': (None, 0, None),
    'ngettext': (None, 0, 1),
    'dgettext': (0, 1, None),
    'dngettext': (0, 1, 2),
}
"""The recognized translation functions.

Each maps to the argument positions of the domain, the message and the
plural message, respectively.  `None` means the function has no such
argument.

"""

DEFAULT_COMMENT_TAGS = ('TRANSLATORS:',)


def template_path(output_dir: str, domain: str, /) -> str:
    """Return the path of the template file for `domain`."""
    return os.path.join(output_dir, f'{domain}.pot')


def _strip_comment_tags(
    comments: Iterable[str], tags: Sequence[str], /
) -> tuple[str, ...]:
    result: list[str] = []
    for comment in comments:
        for tag in tags:
            if comment.startswith(tag):
                comment = comment[len(tag) :]  # noqa: PLW2901
                break
        comment = comment.strip()  # noqa: PLW2901
        if comment:
            result.append(comment)
    return tuple(result)


def _reference_name(filename: str, root: str | None, /) -> str:
    relative = os.path.relpath(filename, root if root is not None else '.')
    return pathlib.PurePath(relative).as_posix()


def scan_file(  # noqa: PLR0913
    session: extractor.ExtractionSession,
    filename: str,
    /,
    *,
    output_dir: str = 'locale',
    default_domain: str = 'messages',
    comment_tags: Sequence[str] = DEFAULT_COMMENT_TAGS,
    root: str | None = None,
) -> int:
    """Record all translatable messages of a Python source file.

    Args:
        session:
            The active extraction session to record the messages with.
        filename:
            The source file to scan.
        output_dir:
            The directory holding the template files.
        default_domain:
            The message domain for calls that do not name one.
        comment_tags:
            Comments immediately preceding a call that start with one
            of these tags are extracted for translators, without the
            tag.
        root:
            The directory that references are relative to.  Defaults
            to the current directory.

    Returns:
        The number of messages recorded.

    Raises:
        OSError:
            The file could not be read.
        SyntaxError:
            The file contains malformed string literals.
        tokenize.TokenError:
            The file could not be tokenized.
        extractor.SessionStateError:
            The session is not active.

    """
    logger.debug(
        _msg.TranslatedString(
            _msg.DebugMsgTemplate.SCANNING_SOURCE_FILE, filename=filename
        )
    )
    reference_name = _reference_name(filename, root)
    count = 0
    with open(filename, 'rb') as fileobj:
        for lineno, funcname, messages, comments in extract.extract_python(
            fileobj, dict.fromkeys(KEYWORDS), list(comment_tags), {}
        ):
            args = messages if isinstance(messages, tuple) else (messages,)
            domain_pos, msgid_pos, plural_pos = KEYWORDS[funcname]
            wanted = [
                args[pos] if pos is not None and pos < len(args) else None
                for pos in (domain_pos, msgid_pos, plural_pos)
            ]
            domain, msgid, plural = wanted
            if (
                not msgid
                or (domain_pos is not None and domain is None)
                or (plural_pos is not None and plural is None)
            ):
                logger.warning(
                    _msg.TranslatedString(
                        _msg.WarnMsgTemplate.NON_LITERAL_MESSAGE,
                        filename=reference_name,
                        lineno=lineno,
                        funcname=funcname,
                    )
                )
                continue
            entry = _types.Entry(
                msgid=(msgid,),
                msgid_plural=(plural,) if plural is not None else None,
                msgstr=('', '') if plural is not None else ('',),
                references=(_types.Reference(reference_name, lineno),),
                extracted_comments=_strip_comment_tags(comments, comment_tags),
            )
            session.record(
                template_path(output_dir, domain or default_domain), entry
            )
            count += 1
    return count


def _is_excluded(path: str, exclude: Sequence[str], /) -> bool:
    posix_path = pathlib.PurePath(path).as_posix()
    name = os.path.basename(path)
    return any(
        fnmatch.fnmatch(posix_path, pattern) or fnmatch.fnmatch(name, pattern)
        for pattern in exclude
    )


def find_source_files(
    source_dirs: Iterable[str],
    /,
    *,
    exclude: Sequence[str] = (),
) -> list[str]:
    """List the Python source files below the source directories.

    Hidden directories are skipped, as are all files and directories
    matching one of the `exclude` glob patterns (either by name or by
    full path).  A source "directory" may also name a single file.

    Returns:
        The source file names, sorted and without duplicates.

    Raises:
        FileNotFoundError:
            A source directory does not exist.

    """
    found: set[str] = set()
    for source_dir in source_dirs:
        if os.path.isfile(source_dir):
            found.add(os.path.normpath(source_dir))
            continue
        if not os.path.isdir(source_dir):
            raise FileNotFoundError(
                errno.ENOENT, os.strerror(errno.ENOENT), source_dir
            )
        for dirpath, dirnames, filenames in os.walk(source_dir):
            dirnames[:] = [
                d
                for d in dirnames
                if not d.startswith('.')
                and not _is_excluded(
                    os.path.normpath(os.path.join(dirpath, d)), exclude
                )
            ]
            for name in filenames:
                path = os.path.normpath(os.path.join(dirpath, name))
                if name.endswith('.py') and not _is_excluded(path, exclude):
                    found.add(path)
    return sorted(found)
