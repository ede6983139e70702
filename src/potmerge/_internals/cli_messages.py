# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Messages for the command-line interface of `potmerge`.

All diagnostics that potmerge emits are defined here as enum members,
grouped by log level, and rendered lazily through [`gettext`][] when
actually stringified.

!!! warning

    Non-public module (implementation detail), provided for didactical and
    educational purposes only.  Subject to change without notice, including
    removal.

"""

from __future__ import annotations

import contextlib
import enum
import functools
import gettext
import os
import pathlib
import sys
import types
from typing import TYPE_CHECKING, NamedTuple, Protocol, Union, cast

from typing_extensions import TypeAlias

from potmerge import _internals

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from typing_extensions import Any, Self

__all__ = ('PROG_NAME',)

PROG_NAME = _internals.PROG_NAME


def load_translations(
    localedirs: list[str | bytes | os.PathLike] | None = None,
    languages: Sequence[str] | None = None,
) -> gettext.NullTranslations:  # pragma: no cover
    """Load a translation catalog for potmerge.

    Runs [`gettext.translation`][] for each locale directory in turn,
    and returns the first catalog found.

    Args:
        localedirs:
            The directories to search.  Defaults to
            `$XDG_DATA_HOME/locale` (usually `~/.local/share/locale`)
            and `{sys.prefix}/share/locale`.
        languages:
            Passed directly to [`gettext.translation`][].

    Returns:
        A (potentially dummy) translation catalog.

    """
    if localedirs is None:
        if sys.platform.startswith('win'):
            xdg_data_home = (
                pathlib.Path(os.environ['APPDATA'])
                if os.environ.get('APPDATA')
                else pathlib.Path('~').expanduser()
            )
        elif os.environ.get('XDG_DATA_HOME'):
            xdg_data_home = pathlib.Path(os.environ['XDG_DATA_HOME'])
        else:
            xdg_data_home = pathlib.Path('~').expanduser() / '.local' / 'share'
        localedirs = [
            pathlib.Path(xdg_data_home, 'locale'),
            pathlib.Path(sys.prefix, 'share', 'locale'),
        ]
    for localedir in localedirs:
        with contextlib.suppress(OSError):
            return gettext.translation(
                PROG_NAME,
                localedir=os.fsdecode(localedir),
                languages=languages,
            )
    return gettext.NullTranslations()


translation = load_translations()


class TranslatableString(NamedTuple):
    """Translatable string as used by the `potmerge` command-line.

    Attributes:
        l10n_context:
            The localization context, as per [`gettext`][].
        singular:
            The translatable message.
        flags:
            Message flags, e.g. to indicate the string formatting style
            in use.
        translator_comments:
            Explicit commentary for the translator.

    """

    l10n_context: str
    """"""
    singular: str
    """"""
    flags: frozenset[str] = frozenset()
    """"""
    translator_comments: str = ''
    """"""

    def maybe_without_filename(self) -> Self:
        """Return a new translatable string without the "filename" field.

        Only acts upon translatable strings containing the exact
        contents `": {filename!r}"`, which is removed.

        """
        a, sep, b = self.singular.partition(': {filename!r}')
        return self._replace(singular=a + b) if sep else self

    def with_comments(self, comments: str, /) -> Self:
        """Add or replace the string's translator comments."""
        comments = ' '.join(comments.split())
        if comments and not comments.startswith('TRANSLATORS:'):
            comments = 'TRANSLATORS: ' + comments
        return self._replace(translator_comments=comments)

    def validate_flags(self) -> Self:
        """Validate the flags against the string.

        Raises:
            ValueError:
                The string contains replacement fields but is not
                flagged `python-brace-format`, or vice versa.

        """
        has_fields = '{' in self.singular
        if has_fields != ('python-brace-format' in self.flags):
            msg = (
                f'Flag python-brace-format does not match '
                f'replacement fields in {self.singular!r}'
            )
            raise ValueError(msg)
        return self


def translatable(
    context: str,
    single: str,
    /,
    flags: Iterable[str] = (),
    comments: str = '',
) -> TranslatableString:
    """Return a [`TranslatableString`][] with validated parts."""
    flags = (
        frozenset(flags) if not isinstance(flags, str) else frozenset({flags})
    )
    return (
        TranslatableString(context.strip(), single, flags=flags)
        .with_comments(comments)
        .validate_flags()
    )


class TranslatableStringConstructor(Protocol):
    """Construct a [`TranslatableString`][]."""

    def __call__(
        self,
        context: str,
        single: str,
        /,
        flags: Iterable[str] = (),
        comments: str = '',
    ) -> TranslatableString:
        """Return a [`TranslatableString`][] from these parts."""


def commented(comments: str = '', /) -> TranslatableStringConstructor:
    """A "decorator" for readably constructing commented enum values.

    Returns a partial application of [`translatable`][] with the
    `comments` argument pre-filled.

    """  # noqa: DOC201
    return functools.partial(translatable, comments=comments)


class TranslatedString:
    """A string object that stringifies to its translation.

    The translation and replacement value rendering is only performed
    when this string object is actually stringified.

    """

    def __init__(
        self,
        template: str | TranslatableString | MsgTemplate,
        args_dict: Mapping[str, Any] = types.MappingProxyType({}),
        /,
        **kwargs: Any,  # noqa: ANN401
    ) -> None:
        if isinstance(template, MSG_TEMPLATE_CLASSES):
            template = cast('TranslatableString', template.value)
        self.template = template
        self.kwargs = {**args_dict, **kwargs}
        self._rendered: str | None = None

    def __bool__(self) -> bool:
        return bool(str(self))

    def __eq__(self, other: object) -> bool:  # pragma: no cover
        return str(self) == other

    def __hash__(self) -> int:  # pragma: no cover
        return hash(str(self))

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f'{self.__class__.__name__}({self.template!r}, '
            f'{dict(self.kwargs)!r})'
        )

    def __str__(self) -> str:
        """Return the rendered translation of this string.

        First, look up the translation of the string's template.  Then
        fill in the replacement fields.  Cache the result for future
        calls.

        """
        if self._rendered is None:
            if isinstance(self.template, str):
                template = translation.gettext(self.template)
            else:
                template = translation.pgettext(
                    self.template.l10n_context, self.template.singular
                )
            kwargs = {
                k: str(v) if isinstance(v, TranslatedString) else v
                for k, v in self.kwargs.items()
            }
            self._rendered = template.format(**kwargs)
        return self._rendered

    def maybe_without_filename(self) -> Self:
        """Return a new string without the "filename" field.

        Only applies if the "filename" replacement value is `None`.

        """
        if isinstance(self.template, str) or self.kwargs.get('filename'):
            return self
        new_template = self.template.maybe_without_filename()
        if new_template == self.template:
            return self
        return self.__class__(new_template, self.kwargs)


class Label(enum.Enum):
    """Labels for the `potmerge` command-line."""

    SUPPORTED_FUNCTIONS = commented(
        "This label is followed by a list of Python function names, "
        "such as \"gettext\" and \"ngettext\".",
    )(
        'Label :: Info Message',
        'Recognized translation functions:',
    )
    """"""
    VERSION_INFO_MAJOR_LIBRARY_TEXT = commented(
        'This message reports on the version of a major library that '
        'potmerge uses, such as "babel".',
    )(
        'Label :: Info Message',
        'Using {dependency_name_and_version}',
        flags='python-brace-format',
    )
    """"""


class DebugMsgTemplate(enum.Enum):
    """Debug messages for the `potmerge` command-line."""

    DROPPING_OBSOLETE_MESSAGE = commented(
        'An extracted message in an existing template file no longer '
        'occurs in the source code, so it is being removed.',
    )(
        'Debug message',
        'Dropping obsolete message {msgid!r}.',
        flags='python-brace-format',
    )
    """"""
    LOADED_CONFIG = commented(
        '',
    )(
        'Debug message',
        'Loaded project configuration from {filename!r}.',
        flags='python-brace-format',
    )
    """"""
    SCANNING_SOURCE_FILE = commented(
        '',
    )(
        'Debug message',
        'Scanning source file {filename!r}.',
        flags='python-brace-format',
    )
    """"""
    SESSION_ENDED = commented(
        '',
    )(
        'Debug message',
        'Extraction session ended.',
    )
    """"""
    SESSION_STARTED = commented(
        '',
    )(
        'Debug message',
        'Extraction session started.',
    )
    """"""
    TEMPLATE_FILE_UP_TO_DATE = commented(
        '',
    )(
        'Debug message',
        'Template file {path!r} is up to date.',
        flags='python-brace-format',
    )
    """"""


class InfoMsgTemplate(enum.Enum):
    """Info messages for the `potmerge` command-line."""

    SCANNED_SOURCE_FILES = commented(
        '"num_files" and "num_messages" are both non-negative integers.',
    )(
        'Info message',
        'Scanned {num_files} source file(s), found {num_messages} '
        'message(s).',
        flags='python-brace-format',
    )
    """"""
    TEMPLATE_FILE_WOULD_CHANGE = commented(
        'Emitted in --check mode, where no files are written.',
    )(
        'Info message',
        'Would write template file {path!r}.',
        flags='python-brace-format',
    )
    """"""
    WROTE_TEMPLATE_FILE = commented(
        '',
    )(
        'Info message',
        'Wrote template file {path!r}.',
        flags='python-brace-format',
    )
    """"""


class WarnMsgTemplate(enum.Enum):
    """Warning messages for the `potmerge` command-line."""

    NON_LITERAL_MESSAGE = commented(
        '"funcname" is the name of a Python function such as "gettext".  '
        'Messages must be written as string literals to be extractable.',
    )(
        'Warning message',
        '{filename}:{lineno}: Skipping call to {funcname}() '
        'without literal message arguments.',
        flags='python-brace-format',
    )
    """"""


class ErrMsgTemplate(enum.Enum):
    """Error messages for the `potmerge` command-line."""

    CANNOT_LOAD_CONFIG = commented(
        '"error" is supplied by the operating system (errno/strerror).',
    )(
        'Error message',
        'Cannot load project configuration: {error}: {filename!r}.',
        flags='python-brace-format',
    )
    """"""
    CANNOT_PARSE_CONFIG = commented(
        '"error" is supplied by the TOML parser.',
    )(
        'Error message',
        'Cannot parse project configuration {filename!r}: {error}.',
        flags='python-brace-format',
    )
    """"""
    CANNOT_READ_TEMPLATE_FILE = commented(
        '"error" is supplied by the operating system (errno/strerror).',
    )(
        'Error message',
        'Cannot read template file: {error}: {filename!r}.',
        flags='python-brace-format',
    )
    """"""
    CANNOT_SCAN_SOURCE_FILE = commented(
        '"error" is supplied by the Python tokenizer or compiler.',
    )(
        'Error message',
        'Cannot scan source file {filename!r}: {error}.',
        flags='python-brace-format',
    )
    """"""
    CANNOT_WRITE_TEMPLATE_FILE = commented(
        '"error" is supplied by the operating system (errno/strerror).',
    )(
        'Error message',
        'Cannot write template file: {error}: {filename!r}.',
        flags='python-brace-format',
    )
    """"""
    INVALID_CONFIG = commented(
        '"error" describes which setting is wrong, and how.',
    )(
        'Error message',
        'Invalid project configuration {filename!r}: {error}.',
        flags='python-brace-format',
    )
    """"""
    MALFORMED_TEMPLATE_FILE = commented(
        '"error" is the parser\'s description of the problem, '
        'prefixed by the file name and line number.',
    )(
        'Error message',
        'Cannot parse template file: {error}.',
        flags='python-brace-format',
    )
    """"""
    SESSION_MISUSE = commented(
        'This indicates a bug in potmerge itself.',
    )(
        'Error message',
        'Internal error: {error}.',
        flags='python-brace-format',
    )
    """"""
    TEMPLATE_FILES_OUT_OF_DATE = commented(
        'Emitted in --check mode.  "num_files" is a positive integer.',
    )(
        'Error message',
        '{num_files} template file(s) are out of date.',
        flags='python-brace-format',
    )
    """"""
    TRANSLATED_TEMPLATE_ENTRY = commented(
        'A template (.pot) file must not contain translations.  '
        '"msgid" is the offending message.',
    )(
        'Error message',
        'Template file {filename!r} contains a translation '
        'for {msgid!r}; leave "msgstr"s in template files empty.',
        flags='python-brace-format',
    )
    """"""
    TRANSLATED_EXTRACTED_ENTRY = commented(
        '"msgid" is the offending message.',
    )(
        'Error message',
        'Extracted message {msgid!r} carries a translation.',
        flags='python-brace-format',
    )
    """"""


MsgTemplate: TypeAlias = Union[
    Label,
    DebugMsgTemplate,
    InfoMsgTemplate,
    WarnMsgTemplate,
    ErrMsgTemplate,
]
"""A type alias for all enums containing translatable strings as values."""
MSG_TEMPLATE_CLASSES = (
    Label,
    DebugMsgTemplate,
    InfoMsgTemplate,
    WarnMsgTemplate,
    ErrMsgTemplate,
)
"""A collection all enums containing translatable strings as values."""
