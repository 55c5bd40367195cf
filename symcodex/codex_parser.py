import dataclasses
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from . import codex_diag
from .codex_alias import resolve_aliases
from .codex_lexer import (
    AliasLine, Blank, Deprecated, Line, ModuleEnd, ModuleStart, SymbolLine, VariantLine,
)
from .codex_modifiers import ModifierSet
from .codex_tree import EMPTY, Binding, Module, Multi, Single, Variant

logger = logging.getLogger('symcodex.parser')

@dataclass(frozen=True)
class DeclModuleStart:
    lineno: int
    name: str
    deprecation: Optional[str]

@dataclass(frozen=True)
class DeclModuleEnd:
    lineno: int

@dataclass(frozen=True)
class DeclSymbol:
    lineno: int
    name: str
    value: Optional[str]
    deprecation: Optional[str]
    modifier_deprecations: Tuple[Tuple[ModifierSet, str], ...] = ()

@dataclass(frozen=True)
class DeclVariant:
    lineno: int
    modifiers: ModifierSet
    value: str

@dataclass(frozen=True)
class DeclAlias:
    lineno: int
    name: str
    target: str
    path: Tuple[str, ...]
    deep: bool
    deprecation: Optional[str]

Declaration = Union[DeclModuleStart, DeclModuleEnd, DeclSymbol, DeclVariant, DeclAlias]

def _error(code: int, msg: str, lineno: int) -> codex_diag.CodexError:
    return codex_diag.CodexError(code, msg, line=lineno)

def _plain_deprecation(pending: List[Deprecated], what: str, lineno: int) -> Optional[str]:
    if any(d.modifiers is not None for d in pending):
        raise _error(codex_diag.E_MALFORMED_MODIFIER_ANNOTATION,
                     f"wrong deprecation format for {what}", lineno)
    if len(pending) > 1:
        raise _error(codex_diag.E_DUPLICATE_DEPRECATION, f"{what} deprecated twice", lineno)
    return pending[0].message if pending else None

def fold_declarations(lines: Iterable[Line]) -> Iterator[Declaration]:
    """
    Drop blank lines and attach `@deprecated` annotations to the declaration
    that follows them.
    """
    pending: List[Deprecated] = []
    lineno = 0
    for line in lines:
        lineno = line.lineno
        if isinstance(line, Blank):
            continue
        if isinstance(line, Deprecated):
            pending.append(line)
        elif isinstance(line, ModuleStart):
            deprecation = _plain_deprecation(pending, "module", lineno)
            pending = []
            yield DeclModuleStart(lineno, line.name, deprecation)
        elif isinstance(line, AliasLine):
            deprecation = _plain_deprecation(pending, "alias", lineno)
            pending = []
            yield DeclAlias(lineno, line.name, line.target, line.path, line.deep, deprecation)
        elif isinstance(line, SymbolLine):
            plain = [d for d in pending if d.modifiers is None]
            if len(plain) > 1:
                raise _error(codex_diag.E_DUPLICATE_DEPRECATION, "symbol deprecated twice", lineno)
            per_variant = tuple((d.modifiers, d.message) for d in pending if d.modifiers is not None)
            if len({m for m, _ in per_variant}) != len(per_variant):
                raise _error(codex_diag.E_DUPLICATE_DEPRECATION, "variant deprecated twice", lineno)
            pending = []
            yield DeclSymbol(lineno, line.name, line.value,
                             plain[0].message if plain else None, per_variant)
        else:
            if pending:
                raise _error(codex_diag.E_DANGLING_DEPRECATION, "dangling `@deprecated:`", lineno)
            if isinstance(line, ModuleEnd):
                yield DeclModuleEnd(lineno)
            elif isinstance(line, VariantLine):
                yield DeclVariant(lineno, line.modifiers, line.value)
    if pending:
        raise _error(codex_diag.E_DANGLING_DEPRECATION, "dangling `@deprecated:`", lineno)

class Parser:
    def __init__(self, declarations: Iterable[Declaration]):
        self.declarations = list(declarations)
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.declarations)

    def current(self) -> Declaration:
        return self.declarations[self.pos]

    def advance(self) -> Declaration:
        decl = self.current()
        self.pos += 1
        return decl

    def peek(self) -> Optional[Declaration]:
        if self.at_end():
            return None
        return self.current()

    def parse_module(self) -> Module:
        return Module(self.parse_scope(None))

    def parse_scope(self, opener: Optional[DeclModuleStart]) -> List[Tuple[str, Binding]]:
        """Parse declarations up to the `}` matching `opener` (or the end of input)."""
        direct: List[Tuple[str, Binding]] = []
        seen = {}
        aliases: List[DeclAlias] = []
        while True:
            if self.at_end():
                if opener is not None:
                    raise _error(codex_diag.E_UNEXPECTED_DECLARATION,
                                 f"unclosed module `{opener.name}`", opener.lineno)
                break
            decl = self.advance()
            if isinstance(decl, DeclModuleEnd):
                if opener is None:
                    raise _error(codex_diag.E_UNEXPECTED_DECLARATION,
                                 "unexpected `}` without open module", decl.lineno)
                break
            if isinstance(decl, DeclAlias):
                aliases.append(decl)
                continue
            if isinstance(decl, DeclSymbol):
                binding = Binding(self.parse_symbol(decl), decl.deprecation)
            elif isinstance(decl, DeclModuleStart):
                binding = Binding(Module(self.parse_scope(decl)), decl.deprecation)
            else:
                raise _error(codex_diag.E_UNEXPECTED_DECLARATION,
                             f"expected definition, found variant `.{decl.modifiers}`", decl.lineno)
            if decl.name in seen:
                raise _error(codex_diag.E_DUPLICATE_DEFINITION,
                             f"`{decl.name}` already defined on line {seen[decl.name]}", decl.lineno)
            seen[decl.name] = decl.lineno
            direct.append((decl.name, binding))

        for alias in aliases:
            if alias.name in seen:
                raise _error(codex_diag.E_DUPLICATE_DEFINITION,
                             f"`{alias.name}` already defined on line {seen[alias.name]}",
                             alias.lineno)
            seen[alias.name] = alias.lineno
        resolved = resolve_aliases(direct, aliases)
        logger.debug("Scope parsed", extra={"extra_data": {
            "module": opener.name if opener else None,
            "definitions": len(direct),
            "aliases": len(resolved),
        }})
        return direct + resolved

    def parse_symbol(self, decl: DeclSymbol):
        variants = []
        while isinstance(self.peek(), DeclVariant):
            v = self.advance()
            variants.append(Variant(v.modifiers, v.value))

        if not variants:
            if decl.value is None:
                raise _error(codex_diag.E_MISSING_VALUE,
                             f"symbol `{decl.name}` needs a value or variants", decl.lineno)
            if decl.modifier_deprecations:
                modifiers, _ = decl.modifier_deprecations[0]
                raise _error(codex_diag.E_DANGLING_DEPRECATION,
                             f"deprecation for nonexistent variant `{modifiers}`", decl.lineno)
            return Single(decl.value)

        if decl.value is not None:
            variants.insert(0, Variant(EMPTY, decl.value))
        for modifiers, message in decl.modifier_deprecations:
            hits = [i for i, v in enumerate(variants) if v.modifiers == modifiers]
            if not hits:
                raise _error(codex_diag.E_DANGLING_DEPRECATION,
                             f"deprecation for nonexistent variant `{modifiers}`", decl.lineno)
            for i in hits:
                variants[i] = dataclasses.replace(variants[i], deprecation=message)
        return Multi(tuple(variants))

def parse(lines: Iterable[Line]) -> Module:
    return Parser(fold_declarations(lines)).parse_module()
