# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Reading and writing gettext PO template files.

The [`parse`][] function turns template text into a [`Catalog`][], the
[`dump`][] function turns a [`Catalog`][] back into canonical template
text.  The canonical text is what potmerge writes, and what it
compares against when deciding whether a template file needs
rewriting, so [`dump`][] is deterministic, and `parse(dump(catalog))
== catalog` holds for every catalog it can represent.

Tokenizing and unquoting is left to Babel's PO file parser; only the
mapping onto our own types, which keeps message fragments and header
lines verbatim, lives here.

"""

from __future__ import annotations

import io
import os
from typing import TYPE_CHECKING

import babel.messages.catalog
from babel.messages import pofile
from typing_extensions import override

from potmerge import _types

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

__all__ = ('CatalogFormatError', 'dump', 'parse')

FIRST_STRONG_ISOLATE = '\u2068'
POP_DIRECTIONAL_ISOLATE = '\u2069'


class CatalogFormatError(ValueError):
    """The text is not a well-formed template catalog.

    Attributes:
        reason:
            A description of the problem.
        lineno:
            The (1-based) line number of the problem, if known.
        filename:
            The name of the offending file, if known.

    """

    def __init__(
        self,
        reason: str,
        lineno: int | None = None,
        filename: str | bytes | os.PathLike | None = None,
    ) -> None:
        self.reason = reason
        self.lineno = lineno
        self.filename = (
            os.fsdecode(filename) if filename is not None else None
        )

    def __str__(self) -> str:
        location = ':'.join(
            str(x) for x in (self.filename, self.lineno) if x is not None
        )
        return f'{location}: {self.reason}' if location else self.reason


def _comment_text(text: str, /) -> str:
    """Drop the single space conventionally following a comment marker."""
    return text[1:] if text.startswith(' ') else text


class _TemplateParser(pofile.PoFileParser):
    """A Babel PO file parser collecting [`_types.Entry`][] objects.

    Babel's own message construction discards the quoted fragments and
    reinterprets the header block.  We hook in at the point where
    a complete message has been tokenized instead.  Translator comments
    and previous message lines (`#|`) are kept verbatim, apart from the
    single space after the comment marker.

    """

    def __init__(self) -> None:
        super().__init__(babel.messages.catalog.Catalog(), abort_invalid=True)
        self.headers: tuple[str, ...] = ()
        self.top_comments: tuple[str, ...] = ()
        self.header_flags: tuple[str, ...] = ()
        self.header_extracted_comments: tuple[str, ...] = ()
        self.entries: list[_types.Entry] = []
        self.obsolete_entries: list[_types.Entry] = []

    @override
    def _reset_message_state(self) -> None:
        super()._reset_message_state()
        self.previous: list[str] = []

    def has_dangling_comments(self) -> bool:
        """Return true if comments were read that no message follows."""
        return bool(
            self.user_comments
            or self.auto_comments
            or self.flags
            or self.locations
            or self.previous
        )

    @override
    def _process_comment(self, line: str) -> None:
        if line[:2] == '#|':
            self._finish_current_message()
            self.previous.append(_comment_text(line[2:]))
        elif line[:2] in {'#:', '#,', '#.'}:
            super()._process_comment(line)
        else:
            self._finish_current_message()
            self.user_comments.append(_comment_text(line[1:]))

    @override
    def _process_message_line(
        self,
        lineno: int,
        line: str,
        obsolete: bool = False,  # noqa: FBT001,FBT002
    ) -> None:
        # "#~|" lines arrive here with the "#~" already removed.
        if obsolete and line[:1] == '|':
            self._finish_current_message()
            self.previous.append(_comment_text(line[1:]))
        else:
            super()._process_message_line(lineno, line, obsolete=obsolete)

    def _unquote(self, fragments: Sequence[str]) -> tuple[str, ...]:
        for fragment in fragments:
            if (
                len(fragment) < 2  # noqa: PLR2004
                or not fragment.startswith('"')
                or not fragment.endswith('"')
            ):
                raise CatalogFormatError(
                    f'unquoted string {fragment!r}', lineno=self.offset + 1
                )
        return tuple(pofile.unescape(fragment) for fragment in fragments)

    @override
    def _add_message(self) -> None:
        if self.context is not None:
            raise CatalogFormatError(
                'message contexts are not supported', lineno=self.offset + 1
            )
        msgid = self._unquote(self.messages[0])
        msgid_plural = (
            self._unquote(self.messages[1]) if len(self.messages) > 1 else None
        )
        forms: dict[int, str] = {}
        for idx, fragments in self.translations:
            forms[idx] = ''.join(self._unquote(fragments))
        msgstr = tuple(
            forms.get(i, '') for i in range(max(forms, default=0) + 1)
        )
        flags = tuple(flag for flag in self.flags if flag)
        if not self.obsolete and not ''.join(msgid) and msgid_plural is None:
            if self.counter:
                raise CatalogFormatError(
                    'empty msgid outside of the header',
                    lineno=self.offset + 1,
                )
            if self.locations or self.previous:
                raise CatalogFormatError(
                    'references and previous messages are not supported '
                    'on the header',
                    lineno=self.offset + 1,
                )
            self.headers = tuple(msgstr[0].splitlines())
            self.top_comments = tuple(self.user_comments)
            self.header_flags = flags
            self.header_extracted_comments = tuple(self.auto_comments)
        else:
            entry = _types.Entry(
                msgid=msgid,
                msgid_plural=msgid_plural,
                msgstr=msgstr,
                references=tuple(
                    _types.Reference(filename, lineno)
                    for filename, lineno in self.locations
                ),
                comments=tuple(self.user_comments),
                extracted_comments=tuple(self.auto_comments),
                flags=flags,
                previous=tuple(self.previous),
            )
            if self.obsolete:
                self.obsolete_entries.append(entry)
            else:
                self.entries.append(entry)
        self.counter += 1
        self._reset_message_state()


def parse(
    text: str,
    /,
    *,
    filename: str | bytes | os.PathLike | None = None,
) -> _types.Catalog:
    """Parse the text of a template file.

    Args:
        text:
            The contents of the template file.
        filename:
            The name of the template file.  Only used in error
            messages.

    Returns:
        The catalog.  A leading entry with an empty msgid is the header
        block: its translation supplies the header lines, its
        translator comments the catalog's top comments, and its flags
        and extracted comments the header flags and header extracted
        comments.  Obsolete (`#~`) entries are collected separately,
        wherever they occur in the file.

    Raises:
        CatalogFormatError:
            The text is malformed, uses message contexts, or ends in
            comments that belong to no message.

    """
    parser = _TemplateParser()
    try:
        parser.parse(io.StringIO(text))
    except pofile.PoFileError as exc:
        reason = str(exc).removesuffix(f' on {exc.lineno}')
        raise CatalogFormatError(
            reason, lineno=exc.lineno + 1, filename=filename
        ) from exc
    except CatalogFormatError as exc:
        if exc.filename is None and filename is not None:
            exc.filename = os.fsdecode(filename)
        raise
    if parser.has_dangling_comments():
        raise CatalogFormatError(
            'comments without a following message', filename=filename
        )
    return _types.Catalog(
        headers=parser.headers,
        entries=tuple(parser.entries),
        top_comments=parser.top_comments,
        header_flags=parser.header_flags,
        header_extracted_comments=parser.header_extracted_comments,
        obsolete_entries=tuple(parser.obsolete_entries),
    )


def _text_lines(text: str, /) -> list[str]:
    """Split text after each newline, keeping the newlines."""
    parts = text.split('\n')
    lines = [part + '\n' for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines or ['']


def _format_string(fragments: Sequence[str], /) -> str:
    return '\n'.join(pofile.escape(f) for f in fragments) or '""'


def _format_comment(prefix: str, text: str, /) -> str:
    return f'{prefix} {text}\n' if text else f'{prefix}\n'


def _format_reference(reference: _types.Reference, /) -> str:
    filename = reference.filename
    if ' ' in filename or '\t' in filename:
        filename = FIRST_STRONG_ISOLATE + filename + POP_DIRECTIONAL_ISOLATE
    if reference.lineno is None:
        return filename
    return f'{filename}:{reference.lineno}'


def _format_header(catalog: _types.Catalog, /) -> Iterator[str]:
    for comment in catalog.top_comments:
        yield _format_comment('#', comment)
    for comment in catalog.header_extracted_comments:
        yield _format_comment('#.', comment)
    if catalog.header_flags:
        yield '#, {}\n'.format(', '.join(catalog.header_flags))
    yield 'msgid ""\n'
    yield 'msgstr ""\n'
    for header in catalog.headers:
        yield pofile.escape(header + '\n') + '\n'


def _format_message(entry: _types.Entry, /) -> Iterator[str]:
    yield f'msgid {_format_string(entry.msgid)}\n'
    if entry.msgid_plural is None:
        msgstr = entry.msgstr[0] if entry.msgstr else ''
        yield f'msgstr {_format_string(_text_lines(msgstr))}\n'
    else:
        yield f'msgid_plural {_format_string(entry.msgid_plural)}\n'
        for i, msgstr in enumerate(entry.msgstr or ('', '')):
            yield f'msgstr[{i}] {_format_string(_text_lines(msgstr))}\n'


def _format_entry(
    entry: _types.Entry, /, *, obsolete: bool = False
) -> Iterator[str]:
    for comment in entry.comments:
        yield _format_comment('#', comment)
    for comment in entry.extracted_comments:
        yield _format_comment('#.', comment)
    if entry.references:
        yield '#: {}\n'.format(
            ' '.join(_format_reference(r) for r in entry.references)
        )
    if entry.flags:
        yield '#, {}\n'.format(', '.join(entry.flags))
    for line in entry.previous:
        yield _format_comment('#~|' if obsolete else '#|', line)
    prefix = '#~ ' if obsolete else ''
    for chunk in _format_message(entry):
        for line in _text_lines(chunk):
            yield prefix + line


def dump(catalog: _types.Catalog, /) -> str:
    """Serialize a catalog as canonical template text.

    The header block is written whenever the catalog has header lines,
    top comments, header flags or header extracted comments.  Entries
    are separated by a single blank line, and obsolete entries follow
    all other entries.  References are written on a single line, in
    order.

    Args:
        catalog:
            The catalog to serialize.

    Returns:
        The template text.  Empty if the catalog is entirely empty.

    """
    blocks: list[str] = []
    if (
        catalog.headers
        or catalog.top_comments
        or catalog.header_flags
        or catalog.header_extracted_comments
    ):
        blocks.append(''.join(_format_header(catalog)))
    blocks.extend(''.join(_format_entry(entry)) for entry in catalog.entries)
    blocks.extend(
        ''.join(_format_entry(entry, obsolete=True))
        for entry in catalog.obsolete_entries
    )
    return '\n'.join(blocks)
