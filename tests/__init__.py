# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

from __future__ import annotations

import contextlib
import os
import pathlib
import sys
import textwrap
from typing import TYPE_CHECKING

import hypothesis
from hypothesis import strategies
from typing_extensions import NamedTuple, Self

from potmerge import _types, cli
from potmerge._internals import cli_machinery

__all__ = ()

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    import click.testing
    import pytest
    from typing_extensions import Any


hypothesis_settings_coverage_compatible = (
    hypothesis.settings(
        # Running under coverage with the Python tracer increases
        # running times 40-fold, on my machines.  Sadly, not every
        # Python version offers the C tracer, so sometimes the Python
        # tracer is used anyway.
        deadline=(
            40 * deadline
            if (deadline := hypothesis.settings().deadline) is not None
            else None
        ),
        suppress_health_check=(hypothesis.HealthCheck.too_slow,),
    )
    if sys.gettrace() is not None
    else hypothesis.settings()
)


# Sample data
# ===========

SAMPLE_MODULE = textwrap.dedent('''\
    from gettext import gettext as _, ngettext


    def greet(name):
        # TRANSLATORS: "name" is the user's login name.
        print(_('Hello, {name}!').format(name=name))


    def count(n):
        print(ngettext('one file', '{n} files', n).format(n=n))


    def farewell():
        print(_('Goodbye.'))
''')
"""A source module with three translatable messages."""

TEMPLATE_PREAMBLE = textwrap.dedent("""\
    # This file is a PO Template file.
    #
    # "msgid"s here are often extracted from source code.
    # Add new messages manually only if they are dynamic
    # messages that cannot be statically extracted.
    #
    # Run "potmerge extract" to bring this file up to
    # date.  Leave "msgstr"s empty as changing them here has no
    # effect: edit them in PO (.po) files instead.
    msgid ""
    msgstr ""
    "MIME-Version: 1.0\\n"
    "Content-Type: text/plain; charset=UTF-8\\n"
    "Content-Transfer-Encoding: 8bit\\n"
""")
"""The comment and header block of a freshly generated template."""

SAMPLE_TEMPLATE = TEMPLATE_PREAMBLE + textwrap.dedent("""\

    #. "name" is the user's login name.
    #: pkg/greetings.py:6
    msgid "Hello, {name}!"
    msgstr ""

    #: pkg/greetings.py:10
    msgid "one file"
    msgid_plural "{n} files"
    msgstr[0] ""
    msgstr[1] ""

    #: pkg/greetings.py:14
    msgid "Goodbye."
    msgstr ""
""")
"""The template generated for [`SAMPLE_MODULE`][]."""

HAND_WRITTEN_ENTRY = textwrap.dedent("""\

    # Built dynamically from the enabled plugin names.
    msgid "Plugin list"
    msgstr ""
""")
"""A hand-written template entry (no source references)."""


def entry(
    msgid: str,
    *refs: tuple[str, int | None],
    msgid_plural: str | None = None,
    **kwargs: Any,  # noqa: ANN401
) -> _types.Entry:
    """Build a template entry more compactly."""
    return _types.Entry(
        msgid=(msgid,),
        msgid_plural=(msgid_plural,) if msgid_plural is not None else None,
        msgstr=kwargs.pop(
            'msgstr', ('', '') if msgid_plural is not None else ('',)
        ),
        references=tuple(_types.Reference(f, n) for f, n in refs),
        **kwargs,
    )


# Hypothesis strategies
# =====================


def _po_text(*, min_size: int = 0) -> strategies.SearchStrategy[str]:
    # No control characters, so that every string survives the
    # line-oriented template syntax.
    return strategies.text(
        strategies.characters(
            exclude_categories=('Cc', 'Cs', 'Zl', 'Zp'),
        ),
        min_size=min_size,
        max_size=20,
    )


def _comment_text() -> strategies.SearchStrategy[str]:
    return _po_text().map(str.strip).filter(
        lambda s: not s or s[0] not in ',.:~|'
    )


references = strategies.builds(
    _types.Reference,
    filename=strategies.from_regex(
        r'[a-z][a-z0-9_]{0,7}(/[a-z][a-z0-9_ ]{0,7}[a-z0-9_])*\.py',
        fullmatch=True,
    ),
    lineno=strategies.integers(min_value=1, max_value=9999),
)
"""Source references with plausible (possibly spaced) filenames."""


@strategies.composite
def template_entries(
    draw: strategies.DrawFn,
    *,
    autogenerated: bool | None = None,
) -> _types.Entry:
    """Template entries, i.e. entries without translated text."""
    msgid = tuple(
        draw(
            strategies.lists(_po_text(), min_size=1, max_size=3).filter(
                lambda frags: bool(''.join(frags))
            )
        )
    )
    plural = draw(
        strategies.none()
        | strategies.lists(_po_text(min_size=1), min_size=1, max_size=2).map(
            tuple
        )
    )
    if autogenerated is None:
        autogenerated = draw(strategies.booleans())
    refs = (
        tuple(draw(strategies.lists(references, min_size=1, max_size=3)))
        if autogenerated
        else ()
    )
    return _types.Entry(
        msgid=msgid,
        msgid_plural=plural,
        msgstr=('', '') if plural is not None else ('',),
        references=refs,
        comments=tuple(
            draw(strategies.lists(_comment_text(), max_size=2))
        ),
        extracted_comments=tuple(
            draw(strategies.lists(_comment_text().filter(bool), max_size=2))
        ),
        flags=tuple(
            draw(
                strategies.lists(
                    strategies.sampled_from([
                        'fuzzy',
                        'python-format',
                        'python-brace-format',
                    ]),
                    max_size=2,
                    unique=True,
                )
            )
        ),
        previous=tuple(draw(strategies.lists(_comment_text(), max_size=1))),
    )


@strategies.composite
def template_catalogs(
    draw: strategies.DrawFn,
    *,
    autogenerated: bool | None = None,
) -> _types.Catalog:
    """Template catalogs with unique message identities."""
    entries = draw(
        strategies.lists(
            template_entries(autogenerated=autogenerated),
            max_size=6,
            unique_by=lambda e: e.key,
        )
    )
    headers = draw(
        strategies.lists(
            strategies.from_regex(r'[A-Z][A-Za-z-]{0,10}: [a-z0-9.]{1,8}',
                                  fullmatch=True),
            max_size=3,
        )
    )
    if headers:
        top_comments = tuple(
            draw(strategies.lists(_comment_text(), max_size=3))
        )
        header_extracted_comments = tuple(
            draw(strategies.lists(_comment_text().filter(bool), max_size=1))
        )
        header_flags = tuple(
            draw(strategies.lists(strategies.just('fuzzy'), max_size=1))
        )
    else:
        top_comments = header_extracted_comments = header_flags = ()
    obsolete_entries = draw(
        strategies.lists(template_entries(autogenerated=False), max_size=2)
    )
    return _types.Catalog(
        headers=tuple(headers),
        entries=tuple(entries),
        top_comments=top_comments,
        header_flags=header_flags,
        header_extracted_comments=header_extracted_comments,
        obsolete_entries=tuple(obsolete_entries),
    )


# Test helpers
# ============


class ReadableResult(NamedTuple):
    """Helper class for formatting and testing click.testing.Result objects."""

    exception: BaseException | None
    exit_code: int
    output: str
    stderr: str

    @classmethod
    def parse(cls, r: click.testing.Result, /) -> Self:
        try:
            stderr = r.stderr
        except ValueError:
            stderr = r.output
        return cls(r.exception, r.exit_code, r.stdout or '', stderr or '')

    def clean_exit(
        self, *, output: str = '', empty_stderr: bool = False
    ) -> bool:
        """Return whether the invocation exited cleanly.

        Args:
            output:
                An expected output string.

        """
        return (
            (
                not self.exception
                or (
                    isinstance(self.exception, SystemExit)
                    and self.exit_code == 0
                )
            )
            and (not output or output in self.output)
            and (not empty_stderr or not self.stderr)
        )

    def error_exit(
        self, *, error: str | type[BaseException] = BaseException
    ) -> bool:
        """Return whether the invocation exited uncleanly.

        Args:
            error:
                An expected error message, or an expected exception
                type.

        """
        if isinstance(error, str):
            return (
                isinstance(self.exception, SystemExit)
                and self.exit_code > 0
                and (not error or error in self.stderr)
            )
        else:  # noqa: RET505
            return isinstance(self.exception, error)


def invoke(
    runner: click.testing.CliRunner,
    args: list[str],
    /,
) -> ReadableResult:
    """Invoke the `potmerge` command with standard CLI logging."""
    with cli_machinery.StandardCLILogging.ensure_standard_logging():
        return ReadableResult.parse(
            runner.invoke(cli.potmerge, args, catch_exceptions=True)
        )


@contextlib.contextmanager
def isolated_project(
    monkeypatch: pytest.MonkeyPatch,
    runner: click.testing.CliRunner,
    files: Mapping[str, str] = {},  # noqa: B006
) -> Iterator[pathlib.Path]:
    """Run in a fresh project directory containing `files`.

    Yields the project directory, which is also the current directory.

    """
    prog_name = cli.PROG_NAME
    env_name = prog_name.replace(' ', '_').upper() + '_CONFIG'
    with runner.isolated_filesystem():
        monkeypatch.delenv(env_name, raising=False)
        root = pathlib.Path(os.getcwd())
        for name, contents in files.items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open('w', encoding='UTF-8', newline='') as outfile:
                outfile.write(contents)
        yield root


def read_text(path: str | os.PathLike) -> str:
    """Read a file the way potmerge reads template files."""
    with open(path, encoding='UTF-8', newline='') as infile:
        return infile.read()
