"""cmmc - command-line entry point

Usage examples:
  cmmc fact.cmm              # IR on stdout
  cmmc fact.cmm -o fact.ir
  cmmc fact.cmm --check-only
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from cmmc.compiler import Compiler


LOG_LEVEL_ENV = "CMMC_LOG_LEVEL"


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    ap = argparse.ArgumentParser(prog="cmmc", description="C-- to three-address code compiler")
    ap.add_argument("source", help="Input C-- source file")
    ap.add_argument("-o", dest="output", required=False, help="Output file for the IR (default: stdout)")
    ap.add_argument("--check-only", action="store_true", help="Stop after semantic checking")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = ap.parse_args(argv)

    level = "DEBUG" if args.verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "WARNING"
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    # Diagnostics go to stderr when stdout carries the IR.
    ir_to_stdout = not (args.output or args.check_only)
    compiler = Compiler(stream=sys.stderr if ir_to_stdout else sys.stdout)
    result = compiler.compile_file(args.source, args.output, check_only=args.check_only)
    if not result.success:
        if result.diagnostics is None:
            for e in result.errors:
                print("Error:", e)
        return 1

    if result.ir is not None and not args.output:
        sys.stdout.write(result.ir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
