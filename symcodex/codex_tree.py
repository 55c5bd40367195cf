"""
The frozen definition tree.

A `Module` is a name-sorted tuple of `(name, Binding)` pairs. A binding holds
either a nested `Module` or a symbol, which is `Single` (one value under the
empty modifier set) or `Multi` (an ordered tuple of variants).
"""

from bisect import bisect_left
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

from .codex_modifiers import ModifierSet

EMPTY = ModifierSet()

@dataclass(frozen=True)
class Variant:
    modifiers: ModifierSet
    value: str
    deprecation: Optional[str] = None

@dataclass(frozen=True)
class Single:
    value: str

    def variants(self) -> Iterator[Variant]:
        yield Variant(EMPTY, self.value)

    def get(self, modifiers: ModifierSet = EMPTY) -> Optional[Tuple[str, Optional[str]]]:
        return _best_variant(self.variants(), modifiers)

@dataclass(frozen=True)
class Multi:
    """A symbol with named modifiers. The first variant is the default."""
    variant_list: Tuple[Variant, ...]

    def variants(self) -> Iterator[Variant]:
        return iter(self.variant_list)

    def get(self, modifiers: ModifierSet = EMPTY) -> Optional[Tuple[str, Optional[str]]]:
        return _best_variant(self.variants(), modifiers)

Symbol = Union[Single, Multi]

def _best_variant(variants, modifiers: ModifierSet):
    found = modifiers.best_match_in((v.modifiers, v) for v in variants)
    if found is None:
        return None
    return found.value, found.deprecation

@dataclass(frozen=True)
class Binding:
    definition: Union[Symbol, 'Module']
    deprecation: Optional[str] = None

    def is_module(self) -> bool:
        return isinstance(self.definition, Module)

class Module:
    """An immutable, name-sorted namespace of bindings."""

    __slots__ = ('_names', '_bindings')

    def __init__(self, entries=()):
        entries = sorted(entries, key=lambda entry: entry[0])
        self._names = tuple(name for name, _ in entries)
        self._bindings = tuple(binding for _, binding in entries)

    def get(self, name: str) -> Optional[Binding]:
        i = bisect_left(self._names, name)
        if i < len(self._names) and self._names[i] == name:
            return self._bindings[i]
        return None

    def iter(self) -> Iterator[Tuple[str, Binding]]:
        return zip(self._names, self._bindings)

    def __iter__(self):
        return self.iter()

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def names(self) -> Tuple[str, ...]:
        return self._names

    def is_sorted_recursively(self) -> bool:
        """Names strictly increase in every module of the tree."""
        if any(a >= b for a, b in zip(self._names, self._names[1:])):
            return False
        return all(b.definition.is_sorted_recursively()
                   for b in self._bindings if isinstance(b.definition, Module))

    def __eq__(self, other):
        if not isinstance(other, Module):
            return NotImplemented
        return self._names == other._names and self._bindings == other._bindings

    def __hash__(self):
        return hash(self._names)

    def __repr__(self):
        return f"Module({list(self._names)!r})"
