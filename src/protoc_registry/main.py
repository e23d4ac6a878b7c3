from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from protoc_registry.loader import RegistryLoadError, load_registry
from protoc_registry.report import render_summary


def run(
    inputs: List[str],
    include_dirs: List[str],
    resolve: bool = True,
    strict: bool = False,
    out: Optional[str] = None,
) -> int:
    """Load the inputs into a registry and print its summary.

    Returns the process exit status.
    """
    try:
        registry = load_registry(inputs, include_dirs, resolve=resolve)
    except (RegistryLoadError, NotImplementedError) as e:
        print(f"FATAL: {e}", file=sys.stderr)
        return 1

    summary = render_summary(registry)
    if out:
        Path(out).write_text(summary)
        print(f"Wrote summary of {len(registry)} type(s) to {out}")
    else:
        sys.stdout.write(summary)

    if strict:
        dangling = registry.unresolved_references()
        for message_name, field_name, type_name in dangling:
            print(f"Unresolved: {message_name}.{field_name} -> {type_name}", file=sys.stderr)
        if dangling:
            return 1

    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Load protobuf descriptor sets into a schema registry and summarise them",
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help="Binary descriptor set files (protoc -o) or .proto sources to compile with protoc",
    )
    parser.add_argument(
        "-I", "--include",
        dest="include_dirs",
        action="append",
        default=[],
        help="Extra import directory passed to protoc (repeatable)",
    )
    parser.add_argument("--no-resolve", action="store_true", help="Skip the reference resolution pass")
    parser.add_argument("--strict", action="store_true", help="Exit with status 1 if any type reference is unresolved")
    parser.add_argument("--out", required=False, help="Write the summary to this file instead of stdout")
    parser.add_argument("--verbose", action="store_true", help="Log import details to stderr")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    sys.exit(run(
        args.inputs,
        args.include_dirs,
        resolve=not args.no_resolve,
        strict=args.strict,
        out=args.out,
    ))


if __name__ == "__main__":
    main()
