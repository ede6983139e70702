# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Test the localization machinery."""

from __future__ import annotations

import gettext
import string
from typing import cast

import hypothesis
import pytest
from hypothesis import strategies

from potmerge._internals import cli_messages as msg

all_translatable_strings_enum_values = tuple(
    sorted(
        (v for enum_class in msg.MSG_TEMPLATE_CLASSES for v in enum_class),
        key=str,
    )
)


def _fields(ts: msg.TranslatableString, /) -> list[str]:
    return [
        field
        for _text, field, _spec, _conv in string.Formatter().parse(
            ts.singular
        )
        if field is not None
    ]


class UppercaseTranslations(gettext.NullTranslations):
    """Translate every message into upper case, keeping the fields."""

    def pgettext(self, context: str, message: str) -> str:
        del context
        return ''.join(
            text.upper() + ('{' + field + ('!' + conv if conv else '') + '}')
            if field is not None
            else text.upper()
            for text, field, _spec, conv in string.Formatter().parse(message)
        )


class TestTranslatableStrings:
    """Tests for the message catalog of the command-line."""

    @hypothesis.given(
        value=strategies.sampled_from(all_translatable_strings_enum_values)
    )
    def test_100_all_messages_render(self, value: msg.MsgTemplate) -> None:
        """Every message renders given values for all of its fields."""
        ts = cast('msg.TranslatableString', value.value)
        kwargs = {field: f'<{field}>' for field in _fields(ts)}
        rendered = str(msg.TranslatedString(value, **kwargs))
        assert rendered
        for field in kwargs:
            assert f'<{field}>' in rendered

    @hypothesis.given(
        value=strategies.sampled_from(all_translatable_strings_enum_values)
    )
    def test_101_flags_match_fields(self, value: msg.MsgTemplate) -> None:
        """Exactly the messages with fields are flagged as format strings."""
        ts = cast('msg.TranslatableString', value.value)
        assert bool(_fields(ts)) == ('python-brace-format' in ts.flags)
        assert ts.validate_flags() is ts

    def test_102_translator_comments(self) -> None:
        """Translator comments are normalized and tagged."""
        ts = msg.translatable('Label', 'Hi', comments='  Greeting,\n  short. ')
        assert ts.translator_comments == 'TRANSLATORS: Greeting, short.'
        assert ts.with_comments('').translator_comments == ''

    @pytest.mark.parametrize(
        ['singular', 'flags'],
        [
            pytest.param('Hello {name}', (), id='missing-flag'),
            pytest.param('Hello', ('python-brace-format',), id='extra-flag'),
        ],
    )
    def test_103_flag_mismatch(
        self, singular: str, flags: tuple[str, ...]
    ) -> None:
        """Mismatched format flags are rejected."""
        with pytest.raises(ValueError, match='python-brace-format'):
            msg.translatable('Label', singular, flags=flags)


class TestTranslatedString:
    """Tests for lazily translated strings."""

    @pytest.mark.parametrize(
        ['filename', 'expected'],
        [
            pytest.param(
                'l10n.toml',
                "Cannot load project configuration: Nope: 'l10n.toml'.",
                id='with-filename',
            ),
            pytest.param(
                None,
                'Cannot load project configuration: Nope.',
                id='without-filename',
            ),
        ],
    )
    def test_200_maybe_without_filename(
        self, filename: str | None, expected: str
    ) -> None:
        """The filename is dropped from messages only if unknown."""
        ts = msg.TranslatedString(
            msg.ErrMsgTemplate.CANNOT_LOAD_CONFIG,
            error='Nope',
            filename=filename,
        ).maybe_without_filename()
        assert str(ts) == expected

    def test_201_translation_is_lazy(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Translation happens upon first stringification, then sticks."""
        ts = msg.TranslatedString(
            msg.InfoMsgTemplate.WROTE_TEMPLATE_FILE, path='a.pot'
        )
        monkeypatch.setattr(msg, 'translation', UppercaseTranslations())
        assert str(ts) == "WROTE TEMPLATE FILE 'a.pot'."
        monkeypatch.setattr(msg, 'translation', gettext.NullTranslations())
        assert str(ts) == "WROTE TEMPLATE FILE 'a.pot'."

    def test_202_nested_translated_strings(self) -> None:
        """Translated strings may be used as replacement values."""
        inner = msg.TranslatedString(msg.Label.SUPPORTED_FUNCTIONS)
        outer = msg.TranslatedString(
            msg.ErrMsgTemplate.SESSION_MISUSE, error=inner
        )
        assert str(outer) == (
            'Internal error: Recognized translation functions:.'
        )

    def test_203_plain_string_templates(self) -> None:
        """Plain strings are translated without a context."""
        assert str(msg.TranslatedString('{a} and {b}', a=1, b=2)) == (
            '1 and 2'
        )
