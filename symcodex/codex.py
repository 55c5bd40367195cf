import hashlib
import json
import logging
import os
import threading
from itertools import combinations
from typing import List, Optional, Tuple

from . import codex_diag
from .codex_config import CodexConfig
from .codex_lexer import tokenize
from .codex_modifiers import Modifier, ModifierSet
from .codex_parser import parse
from .codex_tree import Binding, Module, Multi, Variant

logger = logging.getLogger('symcodex.compiler')

COMPILER = "symcodex 0.1"
CODEX_VERSION = "0.1"

MODULES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'modules')

# corpus name -> (source file, description)
CORPORA = {
    "emoji": ("emoji.txt", "Named emoji."),
    "sym": ("sym.txt", "Named general symbols."),
}

def canonical_json(obj) -> str:
    return json.dumps(obj, sort_keys=True, separators=(',', ':'), ensure_ascii=False)

def compute_source_hash(source: str) -> str:
    return hashlib.sha256(source.encode('utf-8')).hexdigest()

def compile_source(source: str, file: Optional[str] = None) -> Module:
    """Compile notation source text into a frozen module."""
    try:
        module = parse(tokenize(source))
    except codex_diag.CodexError as e:
        raise e.at(file=file)
    logger.info("Module compiled", extra={"extra_data": {
        "file": file,
        "bindings": len(module),
        "source_hash": compute_source_hash(source),
    }})
    return module

def read_source_file(path: str) -> str:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        raise codex_diag.CodexError(codex_diag.E_SOURCE_IO, f"Failed to read {path}: {e}")

def compile_file(path: str) -> Module:
    return compile_source(read_source_file(path), file=path)

def corpus_path(name: str) -> str:
    if name not in CORPORA:
        raise KeyError(f"unknown corpus: {name}")
    return os.path.join(MODULES_DIR, CORPORA[name][0])

def load_corpus(name: str, config: Optional[CodexConfig] = None) -> Module:
    """Compile one shipped corpus, going through the cache when enabled."""
    from . import codex_cache

    config = config or CodexConfig.from_env()
    path = corpus_path(name)
    source = read_source_file(path)
    if not config.use_cache:
        return compile_source(source, file=path)

    source_hash = compute_source_hash(source)
    module = codex_cache.cache_load(source_hash, config.cache_dir)
    if module is not None:
        return module
    module = compile_source(source, file=path)
    codex_cache.cache_store(source_hash, module, config.cache_dir)
    return module

def build_root(config: Optional[CodexConfig] = None) -> Module:
    return Module([(name, Binding(load_corpus(name, config))) for name in CORPORA])

_root: Optional[Module] = None
_root_lock = threading.Lock()

def get_root(config: Optional[CodexConfig] = None) -> Module:
    """The root module holding every corpus, built once per process."""
    global _root
    root = _root
    if root is None:
        with _root_lock:
            if _root is None:
                _root = build_root(config)
            root = _root
    return root

def reset_root() -> None:
    global _root
    with _root_lock:
        _root = None

def resolve(path: str, root: Optional[Module] = None) -> Optional[Tuple[str, Optional[str]]]:
    """
    Look up a dotted path such as `sym.arrow.r.double`.

    Leading components walk nested modules; once a symbol is reached the
    rest of the path is the requested modifier set.
    """
    module = get_root() if root is None else root
    parts = path.split('.')
    for i, part in enumerate(parts):
        binding = module.get(part)
        if binding is None:
            return None
        if isinstance(binding.definition, Module):
            module = binding.definition
            continue
        try:
            request = ModifierSet(Modifier(name) for name in parts[i + 1:] if name)
        except ValueError:
            return None
        return binding.definition.get(request)
    return None

def find_ambiguities(module: Module, prefix: str = "") -> List[Tuple[str, ModifierSet, List[Variant]]]:
    """
    Find requests that more than one variant of a symbol is eligible for.

    A request can only be eligible for variants that carry all of its
    modifiers, so the subsets of each variant's modifiers cover every
    request worth trying.
    """
    found = []
    for name, binding in module:
        path = prefix + name
        definition = binding.definition
        if isinstance(definition, Module):
            found.extend(find_ambiguities(definition, path + "."))
            continue
        if not isinstance(definition, Multi):
            continue
        variants = list(definition.variants())
        requests = {}
        for variant in variants:
            names = variant.modifiers.names()
            for size in range(len(names) + 1):
                for combo in combinations(names, size):
                    request = ModifierSet(Modifier(n) for n in combo)
                    requests.setdefault(request, None)
        for request in requests:
            eligible = [v for v in variants
                        if v.modifiers.required_is_subset(request) and request.is_subset(v.modifiers)]
            if len(eligible) > 1:
                found.append((path, request, eligible))
    return found

def check_module(module: Module) -> List[str]:
    """Report invariant violations of a compiled tree as readable lines."""
    problems = []
    if not module.is_sorted_recursively():
        problems.append("module is not sorted by name")
    for path, request, eligible in find_ambiguities(module):
        candidates = ", ".join(f"`{v.modifiers}`" for v in eligible)
        problems.append(f"{path}: request `{request}` matches {candidates}")
    return problems
