import re
from typing import Tuple

from . import codex_diag

HEX_RE = re.compile(r'[0-9A-Fa-f]+')

VARIATION_SELECTORS = {str(i + 1): chr(0xFE00 + i) for i in range(16)}
VARIATION_SELECTORS["text"] = "\ufe0e"
VARIATION_SELECTORS["emoji"] = "\ufe0f"

COMBINING_CHARS = {
    "not": "\u0338",  # combining long solidus overlay
}

def _split_braced(rest: str, prefix: str) -> Tuple[str, str]:
    close = rest.find('}')
    if close < 0:
        raise codex_diag.CodexError(
            codex_diag.E_UNTERMINATED_ESCAPE,
            f"unclosed escape: {prefix}{rest}")
    return rest[:close], rest[close + 1:]

def decode_codepoint(code: str) -> str:
    """Decode the hex digits of a `\\u{...}` escape into one character."""
    n = int(code, 16) if HEX_RE.fullmatch(code) else None
    if n is None or n > 0x10FFFF or 0xD800 <= n <= 0xDFFF:
        raise codex_diag.CodexError(
            codex_diag.E_INVALID_CODEPOINT,
            f"invalid Unicode escape \\u{{{code}}}")
    return chr(n)

def decode_value(text: str) -> str:
    """
    Decode a raw value token, expanding `\\u{HEX}`, `\\vs{TAG}` and `\\c{TAG}`.

    Literal text is copied as is, so a token may mix literals and escapes.
    """
    result = []
    while text:
        if text.startswith("\\u{"):
            code, text = _split_braced(text[3:], "\\u{")
            result.append(decode_codepoint(code))
        elif text.startswith("\\vs{"):
            tag, text = _split_braced(text[4:], "\\vs{")
            if tag not in VARIATION_SELECTORS:
                raise codex_diag.CodexError(
                    codex_diag.E_INVALID_ESCAPE, f"invalid VS escape: \\vs{{{tag}}}")
            result.append(VARIATION_SELECTORS[tag])
        elif text.startswith("\\c{"):
            tag, text = _split_braced(text[3:], "\\c{")
            if tag not in COMBINING_CHARS:
                raise codex_diag.CodexError(
                    codex_diag.E_INVALID_ESCAPE, f"invalid combining escape: \\c{{{tag}}}")
            result.append(COMBINING_CHARS[tag])
        elif text.startswith("\\"):
            raise codex_diag.CodexError(
                codex_diag.E_INVALID_ESCAPE, f"invalid escape sequence: {text}")
        else:
            i = text.find("\\")
            if i < 0:
                result.append(text)
                break
            result.append(text[:i])
            text = text[i:]
    return "".join(result)
