# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

# ruff: noqa: TRY400

"""Command-line interface for potmerge."""

from __future__ import annotations

import concurrent.futures
import logging
import tokenize
from typing import TYPE_CHECKING, NoReturn

import click

from potmerge import _internals, extractor, merge, po, scanner
from potmerge._internals import cli_helpers, cli_machinery
from potmerge._internals import cli_messages as _msg

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ('potmerge',)

PROG_NAME = _internals.PROG_NAME
VERSION = _internals.VERSION


@click.group(
    context_settings={'help_option_names': ['-h', '--help']},
    cls=cli_machinery.TopLevelCLIEntryPoint,
)
@cli_machinery.version_option
@cli_machinery.standard_logging_options
def potmerge() -> None:
    """Keep gettext template files in sync with Python sources.

    This is a [`click`][CLICK]-powered command-line interface function,
    and not intended for programmatic use.  (See also
    [`click.testing.CliRunner`][] for controlled, programmatic
    invocation.)

    [CLICK]: https://pypi.org/package/click/

    """


@potmerge.command(
    'extract',
    context_settings={'help_option_names': ['-h', '--help']},
)
@click.option(
    '--config',
    'config_file',
    metavar='FILE',
    type=click.Path(dir_okay=False),
    help='Read the project configuration from FILE '
    '(default: [tool.potmerge] in pyproject.toml).',
)
@click.option(
    '-o',
    '--output-dir',
    metavar='DIR',
    help='Write template files to DIR.',
)
@click.option(
    '-d',
    '--domain',
    'default_domain',
    metavar='DOMAIN',
    help='Use DOMAIN for messages without an explicit domain.',
)
@click.option(
    '-x',
    '--exclude',
    metavar='PATTERN',
    multiple=True,
    help='Skip source files and directories matching PATTERN.  '
    'May be given multiple times.',
)
@click.option(
    '-j',
    '--jobs',
    metavar='N',
    callback=cli_machinery.validate_jobs,
    help='Scan source files with N worker threads.',
)
@click.option(
    '--check',
    is_flag=True,
    help='Write nothing; fail if any template file is out of date.',
)
@cli_machinery.version_option
@cli_machinery.standard_logging_options
@click.argument('source_dirs', metavar='[SOURCE_DIR]...', nargs=-1)
@click.pass_context
def potmerge_extract(  # noqa: C901,PLR0912,PLR0913,PLR0915
    ctx: click.Context,
    /,
    *,
    source_dirs: Sequence[str] = (),
    config_file: str | None = None,
    output_dir: str | None = None,
    default_domain: str | None = None,
    exclude: Sequence[str] = (),
    jobs: int | None = None,
    check: bool = False,
) -> None:
    """Extract translatable messages into gettext template files.

    Scan the Python sources for translatable messages, merge them into
    the existing template files, and write all template files that
    changed.  Entries added to a template file by hand are kept.

    This is a [`click`][CLICK]-powered command-line interface function,
    and not intended for programmatic use.  (See also
    [`click.testing.CliRunner`][] for controlled, programmatic
    invocation.)

    [CLICK]: https://pypi.org/package/click/

    """
    logger = logging.getLogger(PROG_NAME)

    def err(msg: _msg.TranslatedString, /) -> NoReturn:
        logger.error(msg, extra={'color': ctx.color})
        ctx.exit(1)

    try:
        config = cli_helpers.load_project_config(config_file)
    except OSError as exc:
        err(
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.CANNOT_LOAD_CONFIG,
                error=exc.strerror,
                filename=exc.filename,
            ).maybe_without_filename()
        )
    except cli_helpers.tomllib.TOMLDecodeError as exc:
        err(
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.CANNOT_PARSE_CONFIG,
                error=exc,
                filename=str(cli_helpers.config_filename(config_file)[0]),
            )
        )
    except (TypeError, ValueError) as exc:
        err(
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.INVALID_CONFIG,
                error=exc,
                filename=str(cli_helpers.config_filename(config_file)[0]),
            )
        )

    source_dirs = list(source_dirs) or config['source-dirs']
    output_dir = output_dir or config['output-dir']
    default_domain = default_domain or config['default-domain']
    exclude = [*config['exclude'], *exclude]
    comment_tags = config['comment-tags']
    jobs = jobs or config['jobs']

    session = extractor.ExtractionSession()
    with session:
        try:
            filenames = scanner.find_source_files(source_dirs, exclude=exclude)
        except OSError as exc:
            err(
                _msg.TranslatedString(
                    _msg.ErrMsgTemplate.CANNOT_SCAN_SOURCE_FILE,
                    filename=exc.filename,
                    error=exc.strerror,
                )
            )
        num_messages = 0
        with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as pool:
            futures = {
                filename: pool.submit(
                    scanner.scan_file,
                    session,
                    filename,
                    output_dir=output_dir,
                    default_domain=default_domain,
                    comment_tags=comment_tags,
                )
                for filename in filenames
            }
            for filename, future in futures.items():
                try:
                    num_messages += future.result()
                except OSError as exc:
                    err(
                        _msg.TranslatedString(
                            _msg.ErrMsgTemplate.CANNOT_SCAN_SOURCE_FILE,
                            filename=filename,
                            error=exc.strerror,
                        )
                    )
                except (
                    SyntaxError,
                    UnicodeDecodeError,
                    tokenize.TokenError,
                ) as exc:
                    err(
                        _msg.TranslatedString(
                            _msg.ErrMsgTemplate.CANNOT_SCAN_SOURCE_FILE,
                            filename=filename,
                            error=exc,
                        )
                    )
        logger.info(
            _msg.TranslatedString(
                _msg.InfoMsgTemplate.SCANNED_SOURCE_FILES,
                num_files=len(filenames),
                num_messages=num_messages,
            ),
            extra={'color': ctx.color},
        )
        extracted = {
            path: cli_helpers.normalize_catalog(catalog)
            for path, catalog in session.snapshot().items()
        }
        try:
            contents = session.flush(extracted)
        except merge.TranslatedTemplateEntryError as exc:
            if exc.filename is not None:
                err(
                    _msg.TranslatedString(
                        _msg.ErrMsgTemplate.TRANSLATED_TEMPLATE_ENTRY,
                        filename=exc.filename,
                        msgid=exc.msgid,
                    )
                )
            err(
                _msg.TranslatedString(
                    _msg.ErrMsgTemplate.TRANSLATED_EXTRACTED_ENTRY,
                    msgid=exc.msgid,
                )
            )
        except po.CatalogFormatError as exc:
            err(
                _msg.TranslatedString(
                    _msg.ErrMsgTemplate.MALFORMED_TEMPLATE_FILE,
                    error=exc,
                )
            )
        except OSError as exc:
            err(
                _msg.TranslatedString(
                    _msg.ErrMsgTemplate.CANNOT_READ_TEMPLATE_FILE,
                    error=exc.strerror,
                    filename=exc.filename,
                ).maybe_without_filename()
            )
        except extractor.SessionStateError as exc:  # pragma: no cover
            err(
                _msg.TranslatedString(
                    _msg.ErrMsgTemplate.SESSION_MISUSE, error=exc
                )
            )

        if check:
            for path in contents:
                logger.info(
                    _msg.TranslatedString(
                        _msg.InfoMsgTemplate.TEMPLATE_FILE_WOULD_CHANGE,
                        path=path,
                    ),
                    extra={'color': ctx.color},
                )
            if contents:
                err(
                    _msg.TranslatedString(
                        _msg.ErrMsgTemplate.TEMPLATE_FILES_OUT_OF_DATE,
                        num_files=len(contents),
                    )
                )
            return
        try:
            cli_helpers.write_files(contents)
        except OSError as exc:
            err(
                _msg.TranslatedString(
                    _msg.ErrMsgTemplate.CANNOT_WRITE_TEMPLATE_FILE,
                    error=exc.strerror,
                    filename=exc.filename,
                ).maybe_without_filename()
            )


if __name__ == '__main__':
    potmerge()
