"""Export the Sleep Journal OpenAPI document to a static JSON file.

Usage:
    python scripts/export_openapi.py                 # writes ./openapi.json
    python scripts/export_openapi.py --out api.json  # custom path
"""

import argparse
import json
from pathlib import Path

from main import app

DEFAULT_PATH = Path(__file__).resolve().parent.parent / "openapi.json"


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--out", type=Path, default=DEFAULT_PATH)
    args = parser.parse_args()

    spec = app.openapi()
    args.out.write_text(json.dumps(spec, indent=2) + "\n")
    print(f"Wrote {args.out} ({len(spec.get('paths', {}))} paths)")


if __name__ == "__main__":
    main()
