import argparse
import logging
import sys

from . import codex
from . import codex_cache
from . import codex_diag
from . import codex_export
from .codex_config import CodexConfig
from .codex_lexer import tokenize
from .codex_logging import setup_logging
from .codex_parser import fold_declarations
from .codex_tree import Module

logger = logging.getLogger('symcodex.cli')

def describe_value(value: str) -> str:
    codepoints = " ".join(f"U+{ord(c):04X}" for c in value)
    return f"{value} ({codepoints})"

def print_trace(source: str):
    lines = list(tokenize(source))
    print("LINES:")
    for line in lines:
        print(f"  {line}")
    print("DECLARATIONS:")
    for decl in fold_declarations(lines):
        print(f"  {decl}")

def load_tree(file: str = None) -> Module:
    if file:
        return codex.compile_file(file)
    return codex.get_root()

def do_compile(filepath: str, out: str = None, trace: bool = False) -> int:
    source = codex.read_source_file(filepath)
    if trace:
        print_trace(source)
    module = codex.compile_source(source, file=filepath)
    source_hash = codex.compute_source_hash(source)
    print(f"bindings: {len(module)}")
    print(f"source_hash: {source_hash}")
    if out:
        codex_export.export_corpus(module, out, source_hash)
        print(f"written: {out}")
    return 0

def do_check(files: list) -> int:
    if not files:
        files = [codex.corpus_path(name) for name in codex.CORPORA]
    failed = False
    for filepath in files:
        problems = codex.check_module(codex.compile_file(filepath))
        if problems:
            failed = True
            print(f"{filepath}: {len(problems)} problem(s)")
            for problem in problems:
                print(f"  {problem}")
        else:
            print(f"{filepath}: ok")
    return 1 if failed else 0

def do_lookup(path: str, file: str = None) -> int:
    found = codex.resolve(path, load_tree(file))
    if found is None:
        print(f"No such symbol: {path}")
        return 1
    value, deprecation = found
    print(f"value: {describe_value(value)}")
    if deprecation:
        print(f"deprecated: {deprecation}")
    return 0

def do_list(path: str = None, file: str = None) -> int:
    node = load_tree(file)
    for part in (path.split('.') if path else []):
        binding = node.get(part) if isinstance(node, Module) else None
        if binding is None:
            print(f"No such module or symbol: {path}")
            return 1
        node = binding.definition
    if isinstance(node, Module):
        for name, binding in node:
            kind = "module" if binding.is_module() else "symbol"
            suffix = f"  [deprecated: {binding.deprecation}]" if binding.deprecation else ""
            print(f"{name}  ({kind}){suffix}")
    else:
        for variant in node.variants():
            suffix = f"  [deprecated: {variant.deprecation}]" if variant.deprecation else ""
            print(f".{variant.modifiers}  {describe_value(variant.value)}{suffix}")
    return 0

def do_cache(command: str, keep: int = 10) -> int:
    cache_dir = CodexConfig.from_env().cache_dir
    if command == 'path':
        print(codex_cache.cache_root(cache_dir))
    elif command == 'clear':
        removed = codex_cache.cache_clear(cache_dir)
        print(f"Removed {len(removed)} entries")
    elif command == 'gc':
        removed = codex_cache.cache_gc(keep, cache_dir)
        for path in removed:
            print(f"Removed: {path}")
        print(f"Kept {len(codex_cache.cache_entries(cache_dir))} entries")
    return 0

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='symcodex', description='Named Unicode symbol notation compiler')
    parser.add_argument('--trace', action='store_true', help='Print lexed lines and declarations')
    parser.add_argument('--log-level', default=None, help='Logging level (DEBUG, INFO, ...)')
    parser.add_argument('--log-json', action='store_true', help='Emit logs as JSON lines')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    compile_parser = subparsers.add_parser('compile', help='Compile a notation file')
    compile_parser.add_argument('filepath', help='Path to the notation file')
    compile_parser.add_argument('--out', help='Write the compiled module as JSON')

    check_parser = subparsers.add_parser('check', help='Check sortedness and ambiguity')
    check_parser.add_argument('files', nargs='*', help='Notation files (default: shipped corpora)')

    lookup_parser = subparsers.add_parser('lookup', help='Resolve a dotted symbol path')
    lookup_parser.add_argument('path', help='e.g. sym.arrow.r.double')
    lookup_parser.add_argument('--file', help='Look up in this notation file instead of the root')

    list_parser = subparsers.add_parser('list', help='List a module or the variants of a symbol')
    list_parser.add_argument('path', nargs='?', help='Dotted module or symbol path')
    list_parser.add_argument('--file', help='List this notation file instead of the root')

    cache_parser = subparsers.add_parser('cache', help='Cache operations')
    cache_subparsers = cache_parser.add_subparsers(dest='cache_command', help='Cache subcommands')
    cache_subparsers.add_parser('path', help='Show cache path')
    cache_subparsers.add_parser('clear', help='Remove every cache entry')
    cache_gc_parser = cache_subparsers.add_parser('gc', help='Garbage collect cache')
    cache_gc_parser.add_argument('--keep', type=int, default=10, help='Number of recent entries to keep')

    return parser

def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = CodexConfig.from_env()
    level = config.log_level
    if args.log_level:
        level = logging.getLevelName(args.log_level.upper())
        if not isinstance(level, int):
            parser.error(f"unknown log level: {args.log_level}")
    setup_logging(level, json_format=args.log_json)

    try:
        if args.command == 'compile':
            return do_compile(args.filepath, args.out, args.trace)
        elif args.command == 'check':
            return do_check(args.files)
        elif args.command == 'lookup':
            return do_lookup(args.path, args.file)
        elif args.command == 'list':
            return do_list(args.path, args.file)
        elif args.command == 'cache':
            if args.cache_command is None:
                raise codex_diag.CodexError(codex_diag.E_CLI_USAGE,
                                            "cache needs a subcommand: path, clear or gc")
            return do_cache(args.cache_command, getattr(args, 'keep', 10))
        else:
            parser.print_help()
            return 0
    except codex_diag.CodexError as e:
        logger.debug("Command failed", exc_info=True, extra={"extra_data": {"command": args.command}})
        print(f"Error: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    sys.exit(main())
