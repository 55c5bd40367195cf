"""
Human-friendly named access to Unicode symbols.

Notation files are compiled into a frozen tree of modules and symbols;
`get_root()` holds the shipped `sym` and `emoji` corpora.
"""

from .codex import (
    CODEX_VERSION, check_module, compile_file, compile_source, find_ambiguities,
    get_root, resolve,
)
from .codex_diag import CodexError
from .codex_modifiers import Modifier, ModifierSet
from .codex_tree import Binding, Module, Multi, Single, Variant

__all__ = [
    'CODEX_VERSION', 'Binding', 'CodexError', 'Modifier', 'ModifierSet', 'Module', 'Multi',
    'Single', 'Variant', 'check_module', 'compile_file', 'compile_source', 'find_ambiguities',
    'get_root', 'resolve',
]
