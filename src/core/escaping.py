"""Escape / unescape for descriptor text fields.

The tag and branch lines are escaped by the producer so that embedded
newlines and control characters keep each field on one physical line.
"""

from __future__ import annotations

_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\0": "\\0",
    "\a": "\\a",
    "\v": "\\v",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
}

_UNESCAPES: dict[str, str] = {
    "0": "\0",
    "a": "\a",
    "v": "\v",
    "t": "\t",
    "r": "\r",
    "n": "\n",
    "b": "\b",
    "f": "\f",
}


def escape(text: str) -> str:
    return "".join(_ESCAPES.get(char, char) for char in text)


def unescape(text: str) -> str:
    """Decode backslash escapes.

    `\\uXXXX` maps to the code point; any other escaped character maps to
    itself. A trailing lone backslash or a short `\\u` sequence raises
    ValueError.
    """

    out: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != "\\":
            out.append(char)
            index += 1
            continue

        if index + 1 >= length:
            raise ValueError("Dangling escape character at end of text")

        code = text[index + 1]
        if code == "u":
            digits = text[index + 2 : index + 6]
            if len(digits) != 4:
                raise ValueError(f"Truncated unicode escape at index {index}")
            out.append(chr(int(digits, 16)))
            index += 6
            continue

        out.append(_UNESCAPES.get(code, code))
        index += 2

    return "".join(out)
