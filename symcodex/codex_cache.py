import json
import logging
import os
from typing import Optional

from . import codex
from . import codex_diag
from .codex_config import CodexConfig
from .codex_export import export_document, module_from_dict
from .codex_tree import Module

logger = logging.getLogger('symcodex.cache')

def cache_root(cache_dir: Optional[str] = None) -> str:
    return cache_dir or CodexConfig.from_env().cache_dir

def cache_path(source_hash: str, cache_dir: Optional[str] = None) -> str:
    return os.path.join(cache_root(cache_dir), f"{source_hash}.json")

def cache_load(source_hash: str, cache_dir: Optional[str] = None) -> Optional[Module]:
    """Load a compiled corpus, or None on a miss or a stale entry."""
    path = cache_path(source_hash, cache_dir)
    if not os.path.exists(path):
        logger.debug("Cache miss", extra={"extra_data": {"source_hash": source_hash}})
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            doc = json.load(f)
        if not isinstance(doc, dict):
            raise ValueError("cache entry is not a JSON object")
        if doc.get('codex_version') != codex.CODEX_VERSION or doc.get('source_hash') != source_hash:
            logger.info("Stale cache entry", extra={"extra_data": {"path": path}})
            return None
        module = module_from_dict(doc['module'])
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning(f"Ignoring unreadable cache entry {path}: {e}")
        return None
    logger.debug("Cache hit", extra={"extra_data": {"source_hash": source_hash}})
    return module

def cache_store(source_hash: str, module: Module, cache_dir: Optional[str] = None) -> str:
    path = cache_path(source_hash, cache_dir)
    tmp_path = path + ".tmp"
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(tmp_path, 'w', encoding='utf-8') as f:
            f.write(codex.canonical_json(export_document(module, source_hash)))
        os.replace(tmp_path, path)
    except OSError as e:
        raise codex_diag.CodexError(codex_diag.E_CACHE_IO, f"Failed to write cache entry {path}: {e}")
    return path

def cache_entries(cache_dir: Optional[str] = None) -> list:
    """Cache files as (mtime, path), newest first."""
    root = cache_root(cache_dir)
    if not os.path.isdir(root):
        return []
    entries = []
    for name in os.listdir(root):
        path = os.path.join(root, name)
        if name.endswith('.json') and os.path.isfile(path):
            entries.append((os.path.getmtime(path), path))
    entries.sort(reverse=True)
    return entries

def cache_gc(keep: int = 10, cache_dir: Optional[str] = None) -> list:
    """Delete all but the `keep` newest entries and return the removed paths."""
    removed = []
    for _, path in cache_entries(cache_dir)[keep:]:
        os.remove(path)
        removed.append(path)
    return removed

def cache_clear(cache_dir: Optional[str] = None) -> list:
    return cache_gc(0, cache_dir)
