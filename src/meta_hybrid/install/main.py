#!/usr/bin/env python3
"""
meta-hybrid install - relocate a staged module into the hybrid layout.

Run by the module installer after the zip has been extracted to MODPATH.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from .relocator import RelocationError, relocate
from ..data.models import BUILTIN_PARTITIONS


def ui_print(msg: str) -> None:
    print(msg, flush=True)


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Move staged partitions out of system/ into the hybrid mount layout",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "modpath",
        nargs="?",
        default=os.environ.get("MODPATH"),
        help="Staged module directory (defaults to $MODPATH)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the meta-hybrid-install command."""
    args = parse_args(argv)
    if not args.modpath:
        print("! MODPATH not set and no module directory given", file=sys.stderr, flush=True)
        return 2
    if not os.path.isdir(args.modpath):
        print(f"! Module directory not found: {args.modpath}", file=sys.stderr, flush=True)
        return 2

    ui_print("- Using Hybrid Mount metainstall")
    try:
        relocate(args.modpath, BUILTIN_PARTITIONS, echo=ui_print)
    except RelocationError as e:
        print(f"! Installation failed: {e}", file=sys.stderr, flush=True)
        return 1
    ui_print("- Installation complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
