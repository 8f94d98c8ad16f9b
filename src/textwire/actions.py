# Copyright 2025, the textwire contributors
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
#
"""Text transformations module.

The four actions a server can apply to a received text.
All of them are pure functions: they never fail and never keep state.
"""

from __future__ import annotations

__all__ = [
    "ACTIONS",
    "Action",
    "lowercase",
    "reverse",
    "title_case",
    "transform",
    "uppercase",
]

import enum
import re
import types
from collections.abc import Callable, Mapping
from typing import Final

_WORD_PATTERN: Final[re.Pattern[str]] = re.compile(r"\S+")


@enum.unique
class Action(enum.StrEnum):
    """The closed set of supported transformations."""

    REVERSE = "reverse"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    TITLE_CASE = "title-case"

    def __repr__(self) -> str:
        return f"{type(self).__name__}.{self.name}"


def reverse(text: str) -> str:
    """Returns `text` with its characters in reverse order."""
    return text[::-1]


def uppercase(text: str) -> str:
    """Returns `text` with every cased character converted to uppercase."""
    return text.upper()


def lowercase(text: str) -> str:
    """Returns `text` with every cased character converted to lowercase."""
    return text.lower()


def title_case(text: str) -> str:
    """
    Capitalizes each whitespace-delimited word of `text`.

    The first character of a word is converted to uppercase and the rest of the word to lowercase.
    Unlike :meth:`str.title`, apostrophes and digits do not start a new word, and whitespace is kept as is::

        >>> title_case("they're  BACK again")
        "They're  Back Again"
    """
    return _WORD_PATTERN.sub(_capitalize_word, text)


def _capitalize_word(match: re.Match[str]) -> str:
    word = match[0]
    return word[:1].upper() + word[1:].lower()


ACTIONS: Final[Mapping[Action, Callable[[str], str]]] = types.MappingProxyType(
    {
        Action.REVERSE: reverse,
        Action.UPPERCASE: uppercase,
        Action.LOWERCASE: lowercase,
        Action.TITLE_CASE: title_case,
    }
)
"""Read-only dispatch table."""


def transform(action: Action | str, text: str) -> str:
    """
    Applies the transformation named `action` to `text`.

    Parameters:
        action: An :class:`Action` member or its string value.
        text: The text to transform.

    Raises:
        ValueError: Unknown action.

    Returns:
        the transformed text.
    """
    return ACTIONS[Action(action)](text)
