"""
Alias resolution.

An alias `name @= target.path[.*]` copies the variants of a sibling symbol
whose modifiers contain every component of `path`, minus those components.
Without `.*` only variants that are fully consumed by the path survive; with
it, the remaining modifiers are kept as the alias's own modifiers.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from . import codex_diag
from .codex_modifiers import ModifierSet
from .codex_tree import Binding, Multi, Single, Variant

logger = logging.getLogger('symcodex.alias')

def strip_path(modifiers: ModifierSet, path: Sequence[str]) -> Optional[ModifierSet]:
    """
    Remove the alias path from a variant's modifiers.

    Returns the leftover modifiers, or None if some path component is
    missing. The path is first matched as a prefix in declaration order; if
    that fails the components are consumed in any order, scanning the
    variant's modifiers left to right, and the first consistent assignment
    is taken.
    """
    mods = list(modifiers)
    if len(mods) >= len(path) and all(m.name == p for m, p in zip(mods, path)):
        return ModifierSet(mods[len(path):])

    remaining = list(path)
    leftover = []
    for m in mods:
        if m.name in remaining:
            remaining.remove(m.name)
        else:
            leftover.append(m)
    if remaining:
        return None
    return ModifierSet(leftover)

def resolve_alias(alias, target: Binding):
    """Build the symbol an alias declaration stands for."""
    symbol = target.definition
    if isinstance(symbol, Single):
        if alias.path:
            raise codex_diag.CodexError(
                codex_diag.E_ALIAS_TO_NONEXISTENT_VARIANT,
                f"alias to nonexistent variant `{alias.target}.{'.'.join(alias.path)}`",
                line=alias.lineno)
        return Single(symbol.value)

    variants: List[Variant] = []
    for variant in symbol.variants():
        leftover = strip_path(variant.modifiers, alias.path)
        if leftover is None or not (leftover.is_empty() or alias.deep):
            continue
        variants.append(Variant(leftover, variant.value, variant.deprecation))

    if not variants:
        raise codex_diag.CodexError(
            codex_diag.E_ALIAS_TO_NONEXISTENT_VARIANT,
            f"alias to nonexistent variant `{'.'.join((alias.target,) + tuple(alias.path))}`",
            line=alias.lineno)
    # A deprecated variant stays a Multi so `get` still reports it.
    if len(variants) == 1 and variants[0].modifiers.is_empty() and variants[0].deprecation is None:
        return Single(variants[0].value)
    return Multi(tuple(variants))

def resolve_aliases(direct: Sequence[Tuple[str, Binding]], aliases) -> List[Tuple[str, Binding]]:
    """
    Turn the alias declarations of one scope into bindings.

    Targets are looked up among the scope's direct symbol bindings only.
    """
    by_name = dict(direct)
    alias_names = {alias.name for alias in aliases}
    resolved = []
    for alias in aliases:
        if alias.target in alias_names:
            raise codex_diag.CodexError(
                codex_diag.E_ALIAS_TO_ALIAS,
                f"alias `{alias.name}` points to alias `{alias.target}`", line=alias.lineno)
        target = by_name.get(alias.target)
        if target is None or target.is_module():
            raise codex_diag.CodexError(
                codex_diag.E_ALIAS_TO_NONEXISTENT_SYMBOL,
                f"alias to nonexistent symbol `{alias.target}`", line=alias.lineno)
        symbol = resolve_alias(alias, target)
        logger.debug("Alias resolved", extra={"extra_data": {
            "alias": alias.name,
            "target": alias.target,
            "deep": alias.deep,
            "variants": sum(1 for _ in symbol.variants()),
        }})
        resolved.append((alias.name, Binding(symbol, alias.deprecation)))
    return resolved
