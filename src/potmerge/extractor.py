# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Extraction sessions: collecting messages during a build.

An [`ExtractionSession`][] spans one build.  Source scanners, possibly
running in several threads at once, report each message they find via
[`ExtractionSession.record`][]; once scanning is complete,
[`ExtractionSession.flush`][] merges everything with the template
files on disk.

There is no global session.  Whoever drives the build creates the
session and hands it to every scanner.

"""

from __future__ import annotations

import logging
import os
import threading
import types
from typing import TYPE_CHECKING

from potmerge import _types, merge
from potmerge._internals import cli_messages as _msg

if TYPE_CHECKING:
    from collections.abc import Mapping

    from typing_extensions import Literal, Self

__all__ = ('ExtractionAccumulator', 'ExtractionSession', 'SessionStateError')

logger = logging.getLogger(__name__)


class SessionStateError(RuntimeError):
    """The extraction session is not in the right state for this call."""


class ExtractionAccumulator:
    """The messages recorded so far, by destination path.

    Safe for concurrent use: all mutation and all reads happen under
    a single lock.

    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._table: dict[str, dict[_types.MessageKey, _types.Entry]] = {}

    def reset(self) -> None:
        """Forget all recorded messages."""
        with self._lock:
            self._table.clear()

    def record(self, path: str, entry: _types.Entry, /) -> None:
        """Record a message for the template file at `path`.

        If a message with the same identity was already recorded for
        `path`, the new references are appended to the existing entry;
        all other fields of the existing entry are kept.

        """
        with self._lock:
            catalog = self._table.setdefault(path, {})
            existing = catalog.get(entry.key)
            if existing is None:
                catalog[entry.key] = entry
            else:
                catalog[entry.key] = existing._replace(
                    references=existing.references + entry.references
                )

    def snapshot(self) -> Mapping[str, _types.Catalog]:
        """Return a read-only view of everything recorded so far.

        The recorded state itself is left untouched.

        """
        with self._lock:
            return types.MappingProxyType({
                path: _types.Catalog(entries=tuple(entries.values()))
                for path, entries in self._table.items()
            })

    def paths(self) -> list[str]:
        """Return the recorded paths, in order of first recording."""
        with self._lock:
            return list(self._table)


class ExtractionSession:
    """The lifecycle of a single message extraction run.

    A session is either idle or active.  [`setup`][] activates it,
    [`teardown`][] deactivates it, and messages can only be recorded or
    flushed while it is active.  The session also works as a context
    manager, which sets it up on entry and tears it down on exit.

    Attributes:
        accumulator:
            The recorded messages.

    """

    def __init__(
        self, accumulator: ExtractionAccumulator | None = None
    ) -> None:
        self.accumulator = (
            accumulator if accumulator is not None else ExtractionAccumulator()
        )
        self._active = False
        self._flushed = False

    def setup(self) -> None:
        """Start a new extraction run with no recorded messages.

        Raises:
            SessionStateError: The session is already active.

        """
        if self._active:
            msg = 'extraction session is already active'
            raise SessionStateError(msg)
        self.accumulator.reset()
        self._active = True
        self._flushed = False
        logger.debug(
            _msg.TranslatedString(_msg.DebugMsgTemplate.SESSION_STARTED)
        )

    def is_active(self) -> bool:
        """Return true if the session is active."""
        return self._active

    def record(self, path: str, entry: _types.Entry, /) -> None:
        """Record a message for the template file at `path`.

        See [`ExtractionAccumulator.record`][].

        Raises:
            SessionStateError: The session is not active.

        """
        if not self._active:
            msg = 'cannot record messages outside an extraction session'
            raise SessionStateError(msg)
        self.accumulator.record(path, entry)

    def snapshot(self) -> Mapping[str, _types.Catalog]:
        """Return a read-only view of everything recorded so far."""
        return self.accumulator.snapshot()

    def flush(
        self,
        extracted: Mapping[str, _types.Catalog] | None = None,
        /,
    ) -> dict[str, str]:
        """Merge the recorded messages with the template files on disk.

        Flushing may happen at most once per session, after all
        recording has finished.  Nothing is written; the caller is
        responsible for writing the returned contents.

        Args:
            extracted:
                The catalogs to merge, by destination path.  Defaults
                to the current snapshot.  Callers may pass
                a normalized version of the snapshot instead.

        Returns:
            The contents of all new or changed template files, by path.
            See [`merge.merge_pot_files`][].

        Raises:
            SessionStateError:
                The session is not active, or was flushed already.

        """
        if not self._active:
            msg = 'cannot flush outside an extraction session'
            raise SessionStateError(msg)
        if self._flushed:
            msg = 'extraction session was flushed already'
            raise SessionStateError(msg)
        self._flushed = True
        if extracted is None:
            extracted = self.snapshot()
        existing_paths = {
            path for path in extracted if os.path.exists(path)
        }
        return merge.merge_pot_files(existing_paths, extracted)

    def teardown(self) -> None:
        """End the extraction run and forget all recorded messages.

        Raises:
            SessionStateError: The session is not active.

        """
        if not self._active:
            msg = 'extraction session is not active'
            raise SessionStateError(msg)
        self._active = False
        self.accumulator.reset()
        logger.debug(
            _msg.TranslatedString(_msg.DebugMsgTemplate.SESSION_ENDED)
        )

    def __enter__(self) -> Self:
        self.setup()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> Literal[False]:
        self.teardown()
        return False
