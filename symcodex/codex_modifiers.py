"""
Modifier sets.

A modifier set is an unordered collection of modifier names, each of which
may be marked optional with a trailing `?`. The dotted form `a.b?` is the
canonical text encoding; iteration follows insertion order, but equality and
hashing ignore it.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, TypeVar

T = TypeVar('T')

OPTIONAL_MARKER = '?'

@dataclass(frozen=True)
class Modifier:
    name: str
    optional: bool = False

    @classmethod
    def from_raw(cls, raw: str) -> 'Modifier':
        optional = raw.endswith(OPTIONAL_MARKER)
        name = raw[:-1] if optional else raw
        if not name or not (name.isascii() and name.isalpha()):
            raise ValueError(f"invalid modifier: {raw!r}")
        return cls(name, optional)

    def __str__(self):
        return self.name + OPTIONAL_MARKER if self.optional else self.name

class ModifierSet:
    __slots__ = ('_modifiers', '_names')

    def __init__(self, modifiers: Iterable[Modifier] = ()):
        mods = tuple(modifiers)
        names = frozenset(m.name for m in mods)
        if len(names) != len(mods):
            raise ValueError(f"duplicate modifier in {'.'.join(map(str, mods))!r}")
        self._modifiers = mods
        self._names = names

    @classmethod
    def from_raw_dotted(cls, raw: str) -> 'ModifierSet':
        """Parse `a.b?.c`. The empty string gives the empty set."""
        if not raw:
            return cls()
        return cls(Modifier.from_raw(part) for part in raw.split('.'))

    def insert_raw(self, raw: str) -> 'ModifierSet':
        """Return a new set with one more modifier, given in raw form."""
        return ModifierSet(self._modifiers + (Modifier.from_raw(raw),))

    def is_empty(self) -> bool:
        return not self._modifiers

    def contains(self, name: str) -> bool:
        return name in self._names

    def __contains__(self, name: str) -> bool:
        return self.contains(name)

    def iter(self) -> Iterator[Modifier]:
        return iter(self._modifiers)

    def __iter__(self) -> Iterator[Modifier]:
        return iter(self._modifiers)

    def __len__(self) -> int:
        return len(self._modifiers)

    def names(self) -> Tuple[str, ...]:
        return tuple(m.name for m in self._modifiers)

    def is_subset(self, other: 'ModifierSet') -> bool:
        """Every modifier name of this set appears in `other`."""
        return self._names <= other._names

    def required_is_subset(self, other: 'ModifierSet') -> bool:
        """Every non-optional modifier of this set appears in `other`."""
        return all(m.name in other._names for m in self._modifiers if not m.optional)

    def best_match_in(self, candidates: Iterable[Tuple['ModifierSet', T]]) -> Optional[T]:
        """
        Pick the value whose modifier set best fits this request.

        A candidate is eligible when its required modifiers are all requested
        and every requested modifier is present on it. Eligible candidates
        rank by the number of modifiers shared with the request (more wins),
        then by their size (fewer wins); the first one wins a tie.
        """
        best = None
        best_score = None
        for modifiers, value in candidates:
            if not (modifiers.required_is_subset(self) and self.is_subset(modifiers)):
                continue
            common = sum(1 for m in modifiers._modifiers if m.name in self._names)
            score = (common, -len(modifiers))
            if best_score is None or score > best_score:
                best = value
                best_score = score
        return best

    def _key(self) -> frozenset:
        return frozenset(self._modifiers)

    def __eq__(self, other):
        if not isinstance(other, ModifierSet):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __str__(self):
        return '.'.join(map(str, self._modifiers))

    def __repr__(self):
        return f"ModifierSet({str(self)!r})"
