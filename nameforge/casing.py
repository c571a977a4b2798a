"""
Case style normalization for generated filename fragments.
"""

import re
from enum import Enum
from typing import List, Union


class CaseStyle(Enum):
    """Target case styles for a filename fragment."""
    SNAKE = "snake_case"
    CAMEL = "camelCase"
    PASCAL = "PascalCase"
    KEBAB = "kebab-case"
    LOWER = "lowercase"
    UPPER = "uppercase"

    @classmethod
    def parse(cls, name: str) -> "CaseStyle":
        """
        Map a user-supplied style name onto a CaseStyle.

        Matching ignores case and any underscores, hyphens or spaces, so
        ``snake_case``, ``SnakeCase`` and ``snake`` are equivalent. Unknown
        names map to SNAKE.
        """
        key = re.sub(r'[\s_-]', '', name or '').lower()
        if key.endswith('case') and key != 'case':
            key = key[:-len('case')]
        return _STYLE_NAMES.get(key, cls.SNAKE)


_STYLE_NAMES = {
    'snake': CaseStyle.SNAKE,
    'camel': CaseStyle.CAMEL,
    'pascal': CaseStyle.PASCAL,
    'kebab': CaseStyle.KEBAB,
    'lower': CaseStyle.LOWER,
    'upper': CaseStyle.UPPER,
}

_SEPARATORS = {' ', '-', '_'}


def split_words(text: str) -> List[str]:
    """Split on any run of non-alphanumeric characters."""
    return [word for word in re.split(r'[\W_]+', text) if word]


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def to_snake_case(text: str) -> str:
    result = []
    prev_upper = False

    for ch in text:
        if ch.isupper():
            # no leading separator, even when dropped characters precede the letter
            if result and not prev_upper and result[-1] != '_':
                result.append('_')
            result.append(ch.lower())
            prev_upper = True
        elif ch.isalnum():
            result.append(ch)
            prev_upper = False
        elif ch in _SEPARATORS:
            if result and result[-1] != '_':
                result.append('_')
            prev_upper = False
        # anything else is dropped

    return ''.join(result).rstrip('_')


def to_camel_case(text: str) -> str:
    words = split_words(text)
    if not words:
        return ''
    return words[0].lower() + ''.join(_capitalize(word) for word in words[1:])


def to_pascal_case(text: str) -> str:
    return ''.join(_capitalize(word) for word in split_words(text))


def to_kebab_case(text: str) -> str:
    return to_snake_case(text).replace('_', '-')


def convert(text: str, style: Union[CaseStyle, str]) -> str:
    """Convert ``text`` into ``style``; string styles are parsed first."""
    if not isinstance(style, CaseStyle):
        style = CaseStyle.parse(style)

    if style is CaseStyle.CAMEL:
        return to_camel_case(text)
    if style is CaseStyle.PASCAL:
        return to_pascal_case(text)
    if style is CaseStyle.KEBAB:
        return to_kebab_case(text)
    if style is CaseStyle.LOWER:
        return to_snake_case(text).lower()
    if style is CaseStyle.UPPER:
        return to_snake_case(text).upper()
    return to_snake_case(text)
