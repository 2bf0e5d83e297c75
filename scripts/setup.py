#!/usr/bin/env python3
"""
Bootstrap a uv virtual environment for the planet generator.

Usage: python scripts/setup.py [viewer] [dev]
"""

import shutil
import subprocess
import sys

EXTRAS = ("viewer", "dev")


def main(argv=None) -> int:
    extras = sys.argv[1:] if argv is None else argv
    unknown = [name for name in extras if name not in EXTRAS]
    if unknown:
        print(f"✗ Unknown extras: {', '.join(unknown)} (choose from {', '.join(EXTRAS)})")
        return 2

    if shutil.which("uv") is None:
        print("✗ uv not found; see https://docs.astral.sh/uv/ to install it")
        return 1

    target = f".[{','.join(extras)}]" if extras else "."
    for cmd in (["uv", "venv"], ["uv", "pip", "install", "-e", target]):
        print(f"Running: {' '.join(cmd)}")
        subprocess.run(cmd, check=True)

    print("✓ Environment ready; activate with: source .venv/bin/activate")
    return 0


if __name__ == "__main__":
    sys.exit(main())
