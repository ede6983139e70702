# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Types used by potmerge."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Union

from typing_extensions import (
    NamedTuple,
    NotRequired,
    TypedDict,
)

if TYPE_CHECKING:
    from typing_extensions import (
        Any,
        TypeIs,
    )

__all__ = (
    'Catalog',
    'Entry',
    'ProjectConfig',
    'Reference',
    'is_project_config',
)


class Reference(NamedTuple):
    """A source location where a message was found.

    Attributes:
        filename:
            The source filename, usually relative to the project root.
        lineno:
            The line number within the file.  May be `None` for
            references read from a template file that does not record
            line numbers.

    """

    filename: str
    """"""
    lineno: Optional[int] = None
    """"""


MessageKey = tuple[str, Union[str, None]]
"""The identity of a message: singular text, and plural text if any."""


class Entry(NamedTuple):
    """A single message entry of a template catalog.

    Attributes:
        msgid:
            The fragments of the singular message.  Fragments are kept
            as given (e.g. one per concatenated string literal, or one
            per quoted line in a template file); only their
            concatenation is significant for identity.
        msgid_plural:
            The fragments of the plural message, if this is
            a pluralized message.
        msgstr:
            The translated text, one item per plural form.  Template
            entries carry only empty strings here.
        references:
            The source locations of the message.  An entry with at
            least one reference was discovered by scanning the source;
            an entry without references was added by hand.
        comments:
            Translator comments (`# ...`).
        extracted_comments:
            Comments extracted from the source (`#. ...`).
        flags:
            Flags (`#, ...`), in file order.
        previous:
            The previous message lines (`#| ...`) left behind by
            gettext's fuzzy matching, kept verbatim.

    """

    msgid: tuple[str, ...]
    """"""
    msgid_plural: Optional[tuple[str, ...]] = None
    """"""
    msgstr: tuple[str, ...] = ('',)
    """"""
    references: tuple[Reference, ...] = ()
    """"""
    comments: tuple[str, ...] = ()
    """"""
    extracted_comments: tuple[str, ...] = ()
    """"""
    flags: tuple[str, ...] = ()
    """"""
    previous: tuple[str, ...] = ()
    """"""

    @property
    def key(self) -> MessageKey:
        """The identity of this message.

        Two entries denote the same message if and only if their
        singular and plural texts agree.  References, comments, flags
        and translations do not participate.

        """
        return (
            ''.join(self.msgid),
            ''.join(self.msgid_plural)
            if self.msgid_plural is not None
            else None,
        )

    @property
    def is_autogenerated(self) -> bool:
        """True if this entry was discovered by scanning the source."""
        return bool(self.references)

    @property
    def is_template(self) -> bool:
        """True if this entry carries no translated text."""
        return not any(self.msgstr)


class Catalog(NamedTuple):
    """A template catalog: header block plus ordered entries.

    Attributes:
        headers:
            The header lines (`Name: value`), in file order.
        entries:
            The message entries, in file order.
        top_comments:
            The comment lines preceding the header block.
        header_flags:
            The flags of the header block, e.g. `fuzzy`.
        header_extracted_comments:
            The extracted comments (`#. ...`) of the header block.
        obsolete_entries:
            The obsolete (`#~`) entries, in file order.  They are kept
            as they are, and written after all other entries.

    """

    headers: tuple[str, ...] = ()
    """"""
    entries: tuple[Entry, ...] = ()
    """"""
    top_comments: tuple[str, ...] = ()
    """"""
    header_flags: tuple[str, ...] = ()
    """"""
    header_extracted_comments: tuple[str, ...] = ()
    """"""
    obsolete_entries: tuple[Entry, ...] = ()
    """"""


_ProjectConfig = TypedDict(
    '_ProjectConfig',
    {
        'source-dirs': NotRequired[list[str]],
        'output-dir': NotRequired[str],
        'default-domain': NotRequired[str],
        'exclude': NotRequired[list[str]],
        'comment-tags': NotRequired[list[str]],
        'jobs': NotRequired[int],
    },
    total=False,
)


class ProjectConfig(_ProjectConfig, total=False):
    r"""Project configuration for potmerge.  For typing purposes.

    Usually stored as the `[tool.potmerge]` table of `pyproject.toml`.

    Attributes:
        source-dirs (NotRequired[list[str]]):
            Directories to scan for Python sources.
        output-dir (NotRequired[str]):
            Directory holding the template files.
        default-domain (NotRequired[str]):
            Message domain for calls that do not name one.
        exclude (NotRequired[list[str]]):
            Glob patterns of source files or directories to skip.
        comment-tags (NotRequired[list[str]]):
            Prefixes of source comments to extract for translators.
        jobs (NotRequired[int]):
            Number of worker threads used for scanning.

    """


def validate_project_config(
    obj: Any,  # noqa: ANN401
    /,
) -> None:
    """Check that `obj` is a valid project config.

    Args:
        obj:
            The object to test.

    Raises:
        TypeError:
            An entry in the project config, or the project config
            itself, has the wrong type.
        ValueError:
            An entry in the project config is unknown, or has
            a disallowed value.

    """
    err_obj_not_a_dict = 'project config is not a table'

    def err_not_a_string(key: str, /) -> str:
        return f'project config entry {key!r} is not a string'

    def err_not_a_string_list(key: str, /) -> str:
        return f'project config entry {key!r} is not a list of strings'

    def err_empty(key: str, /) -> str:
        return f'project config entry {key!r} is empty'

    if not isinstance(obj, dict):
        raise TypeError(err_obj_not_a_dict)
    for key, value in obj.items():
        if key in {'output-dir', 'default-domain'}:
            if not isinstance(value, str):
                raise TypeError(err_not_a_string(key))
            if not value:
                raise ValueError(err_empty(key))
        elif key in {'source-dirs', 'exclude', 'comment-tags'}:
            if not isinstance(value, list) or not all(
                isinstance(x, str) for x in value
            ):
                raise TypeError(err_not_a_string_list(key))
        elif key == 'jobs':
            # bool is an int subclass, but never a sensible job count.
            if not isinstance(value, int) or isinstance(value, bool):
                msg = f'project config entry {key!r} is not an integer'
                raise TypeError(msg)
            if value < 1:
                msg = f'project config entry {key!r} is not positive'
                raise ValueError(msg)
        else:
            msg = f'project config uses unknown setting {key!r}'
            raise ValueError(msg)


def is_project_config(obj: Any) -> TypeIs[ProjectConfig]:  # noqa: ANN401
    """Check if `obj` is a valid project config, according to typing.

    Args:
        obj: The object to test.

    Returns:
        True if this is a project config, false otherwise.

    """
    try:
        validate_project_config(obj)
    except (TypeError, ValueError) as exc:
        if 'project config ' not in str(exc):  # pragma: no cover
            raise  # noqa: DOC501
        return False
    return True
