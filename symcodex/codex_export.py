from typing import Optional

from . import codex
from . import codex_diag
from .codex_modifiers import ModifierSet
from .codex_tree import Binding, Module, Multi, Single, Variant

def symbol_to_dict(symbol) -> dict:
    if isinstance(symbol, Single):
        return {"kind": "single", "value": symbol.value}
    return {
        "kind": "multi",
        "variants": [[str(v.modifiers), v.value, v.deprecation] for v in symbol.variants()],
    }

def module_to_dict(module: Module) -> dict:
    bindings = []
    for name, binding in module:
        if isinstance(binding.definition, Module):
            definition = module_to_dict(binding.definition)
        else:
            definition = symbol_to_dict(binding.definition)
        bindings.append([name, {"def": definition, "deprecation": binding.deprecation}])
    return {"kind": "module", "bindings": bindings}

def definition_from_dict(data: dict):
    kind = data.get("kind") if isinstance(data, dict) else None
    if kind == "module":
        return module_from_dict(data)
    if kind == "single":
        return Single(data["value"])
    if kind == "multi":
        return Multi(tuple(
            Variant(ModifierSet.from_raw_dotted(mods), value, deprecation)
            for mods, value, deprecation in data["variants"]
        ))
    raise ValueError(f"unknown definition kind: {kind!r}")

def module_from_dict(data: dict) -> Module:
    """Rebuild a frozen module from `module_to_dict` output."""
    if not isinstance(data, dict) or data.get("kind") != "module":
        raise ValueError("expected a module")
    return Module([
        (name, Binding(definition_from_dict(entry["def"]), entry.get("deprecation")))
        for name, entry in data["bindings"]
    ])

def export_document(module: Module, source_hash: Optional[str] = None) -> dict:
    return {
        "codex_version": codex.CODEX_VERSION,
        "source_hash": source_hash,
        "module": module_to_dict(module),
    }

def export_corpus(module: Module, out_path: str, source_hash: Optional[str] = None) -> None:
    try:
        with open(out_path, 'w', encoding='utf-8') as f:
            f.write(codex.canonical_json(export_document(module, source_hash)))
    except OSError as e:
        raise codex_diag.CodexError(codex_diag.E_EXPORT_IO, f"Error writing {out_path}: {e}")
