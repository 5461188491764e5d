"""Character to evdev key code mapping.

Physical key codes are an arbitrary enumeration with no numeric relationship
to character codes, so the mapping is an explicit table rather than derived.
Shifted symbols are listed as (base key, shift) pairs for a US layout.
"""

from typing import Dict, FrozenSet, NamedTuple

from evdev import ecodes


class KeySpec(NamedTuple):
    """A physical key and whether Shift must be held while it is tapped."""

    key: int
    shift: bool


UNSUPPORTED = KeySpec(ecodes.KEY_RESERVED, False)
SHIFT = KeySpec(ecodes.KEY_LEFTSHIFT, False)

KEY_TABLE: Dict[str, KeySpec] = {
    # Digits and their shifted symbols
    "1": KeySpec(ecodes.KEY_1, False),
    "2": KeySpec(ecodes.KEY_2, False),
    "3": KeySpec(ecodes.KEY_3, False),
    "4": KeySpec(ecodes.KEY_4, False),
    "5": KeySpec(ecodes.KEY_5, False),
    "6": KeySpec(ecodes.KEY_6, False),
    "7": KeySpec(ecodes.KEY_7, False),
    "8": KeySpec(ecodes.KEY_8, False),
    "9": KeySpec(ecodes.KEY_9, False),
    "0": KeySpec(ecodes.KEY_0, False),
    "!": KeySpec(ecodes.KEY_1, True),
    "@": KeySpec(ecodes.KEY_2, True),
    "#": KeySpec(ecodes.KEY_3, True),
    "$": KeySpec(ecodes.KEY_4, True),
    "%": KeySpec(ecodes.KEY_5, True),
    "^": KeySpec(ecodes.KEY_6, True),
    "&": KeySpec(ecodes.KEY_7, True),
    "*": KeySpec(ecodes.KEY_8, True),
    "(": KeySpec(ecodes.KEY_9, True),
    ")": KeySpec(ecodes.KEY_0, True),
    # Punctuation
    "-": KeySpec(ecodes.KEY_MINUS, False),
    "_": KeySpec(ecodes.KEY_MINUS, True),
    "=": KeySpec(ecodes.KEY_EQUAL, False),
    "+": KeySpec(ecodes.KEY_EQUAL, True),
    "[": KeySpec(ecodes.KEY_LEFTBRACE, False),
    "{": KeySpec(ecodes.KEY_LEFTBRACE, True),
    "]": KeySpec(ecodes.KEY_RIGHTBRACE, False),
    "}": KeySpec(ecodes.KEY_RIGHTBRACE, True),
    "\\": KeySpec(ecodes.KEY_BACKSLASH, False),
    "|": KeySpec(ecodes.KEY_BACKSLASH, True),
    ";": KeySpec(ecodes.KEY_SEMICOLON, False),
    ":": KeySpec(ecodes.KEY_SEMICOLON, True),
    "'": KeySpec(ecodes.KEY_APOSTROPHE, False),
    '"': KeySpec(ecodes.KEY_APOSTROPHE, True),
    "`": KeySpec(ecodes.KEY_GRAVE, False),
    "~": KeySpec(ecodes.KEY_GRAVE, True),
    ",": KeySpec(ecodes.KEY_COMMA, False),
    "<": KeySpec(ecodes.KEY_COMMA, True),
    ".": KeySpec(ecodes.KEY_DOT, False),
    ">": KeySpec(ecodes.KEY_DOT, True),
    "/": KeySpec(ecodes.KEY_SLASH, False),
    "?": KeySpec(ecodes.KEY_SLASH, True),
    # Whitespace
    " ": KeySpec(ecodes.KEY_SPACE, False),
    "\n": KeySpec(ecodes.KEY_ENTER, False),
    "\t": KeySpec(ecodes.KEY_TAB, False),
}

# Letters: lowercase taps the key, uppercase holds Shift
for _letter in "abcdefghijklmnopqrstuvwxyz":
    _code = ecodes.ecodes["KEY_" + _letter.upper()]
    KEY_TABLE[_letter] = KeySpec(_code, False)
    KEY_TABLE[_letter.upper()] = KeySpec(_code, True)
del _letter, _code

SUPPORTED_CHARS: FrozenSet[str] = frozenset(KEY_TABLE)


def map_char(char: str) -> KeySpec:
    """Map a single character to its KeySpec.

    Never raises. Anything outside SUPPORTED_CHARS (including non-ASCII
    characters and multi-character strings) maps to UNSUPPORTED, and the
    caller decides whether to skip it.
    """
    return KEY_TABLE.get(char, UNSUPPORTED)


def is_supported(char: str) -> bool:
    return char in KEY_TABLE


def required_keys() -> FrozenSet[int]:
    """Every key a virtual keyboard needs to type SUPPORTED_CHARS."""
    return frozenset(spec.key for spec in KEY_TABLE.values()) | {SHIFT.key}
