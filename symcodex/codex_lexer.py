from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

from . import codex_diag
from .codex_escape import decode_value
from .codex_modifiers import ModifierSet

DEPRECATED_HEAD = "@deprecated"
ALIAS_MARKER = "@="
DEEP_MARKER = "*"

@dataclass(frozen=True)
class LineNode:
    lineno: int

@dataclass(frozen=True)
class Blank(LineNode):
    pass

@dataclass(frozen=True)
class Deprecated(LineNode):
    modifiers: Optional[ModifierSet]
    message: str

@dataclass(frozen=True)
class ModuleStart(LineNode):
    name: str

@dataclass(frozen=True)
class ModuleEnd(LineNode):
    pass

@dataclass(frozen=True)
class SymbolLine(LineNode):
    name: str
    value: Optional[str]

@dataclass(frozen=True)
class VariantLine(LineNode):
    modifiers: ModifierSet
    value: str

@dataclass(frozen=True)
class AliasLine(LineNode):
    name: str
    target: str
    path: Tuple[str, ...]
    deep: bool

Line = Union[Blank, Deprecated, ModuleStart, ModuleEnd, SymbolLine, VariantLine, AliasLine]

def validate_ident(string: str) -> str:
    """Identifiers are non-empty runs of ASCII letters, nothing else."""
    if string and string.isascii() and string.isalpha():
        return string
    raise codex_diag.CodexError(codex_diag.E_INVALID_IDENTIFIER, f"invalid identifier: {string!r}")

def parse_modifiers(raw: str) -> ModifierSet:
    for part in raw.split('.'):
        validate_ident(part[:-1] if part.endswith('?') else part)
    try:
        return ModifierSet.from_raw_dotted(raw)
    except ValueError as e:
        raise codex_diag.CodexError(codex_diag.E_DUPLICATE_MODIFIER, str(e))

def strip_comment(line: str) -> str:
    head, _, _ = line.partition("//")
    return head.strip()

def _parse_deprecated(lineno: int, head: str, tail: Optional[str]) -> Deprecated:
    inner = head[len(DEPRECATED_HEAD):-1]
    modifiers = None
    if inner:
        if not (inner.startswith('(') and inner.endswith(')')) or len(inner) < 3:
            raise codex_diag.CodexError(
                codex_diag.E_MALFORMED_MODIFIER_ANNOTATION,
                f"malformed modifier in deprecation: {head!r}")
        try:
            modifiers = ModifierSet.from_raw_dotted(inner[1:-1])
        except ValueError:
            raise codex_diag.CodexError(
                codex_diag.E_MALFORMED_MODIFIER_ANNOTATION,
                f"malformed modifier in deprecation: {head!r}")
    if not tail:
        raise codex_diag.CodexError(
            codex_diag.E_MISSING_DEPRECATION_MESSAGE, "missing deprecation message")
    return Deprecated(lineno, modifiers, tail)

def _parse_alias(lineno: int, line: str) -> AliasLine:
    name, _, target = line.partition(ALIAS_MARKER)
    name = validate_ident(name.strip())
    parts = target.strip().split('.')
    deep = len(parts) > 1 and parts[-1] == DEEP_MARKER
    if deep:
        parts.pop()
    for part in parts:
        validate_ident(part)
    return AliasLine(lineno, name, parts[0], tuple(parts[1:]), deep)

def tokenize_line(line: str, lineno: int = 0) -> Line:
    """Classify a single source line. The first matching rule wins."""
    line = strip_comment(line)
    if not line:
        return Blank(lineno)

    parts = line.split(None, 1)
    head = parts[0]
    tail = parts[1].strip() if len(parts) > 1 else None

    if head.startswith(DEPRECATED_HEAD):
        if not head.endswith(':'):
            raise codex_diag.CodexError(
                codex_diag.E_UNEXPECTED_DECLARATION,
                f"expected `@deprecated:` or `@deprecated(...):`, found {head!r}")
        return _parse_deprecated(lineno, head, tail)
    if tail == "{":
        return ModuleStart(lineno, validate_ident(head))
    if head == "}" and tail is None:
        return ModuleEnd(lineno)
    if head.startswith('.'):
        modifiers = parse_modifiers(head[1:])
        if tail is None:
            raise codex_diag.CodexError(codex_diag.E_MISSING_VALUE, "missing value for variant")
        return VariantLine(lineno, modifiers, decode_value(tail))
    if ALIAS_MARKER in line:
        return _parse_alias(lineno, line)
    value = decode_value(tail) if tail is not None else None
    return SymbolLine(lineno, validate_ident(head), value)

def tokenize(text: str) -> Iterator[Line]:
    """Lex every line of a source text, tagging errors with their line number."""
    for lineno, raw in enumerate(text.splitlines(), 1):
        try:
            yield tokenize_line(raw, lineno)
        except codex_diag.CodexError as e:
            raise e.at(line=lineno)
