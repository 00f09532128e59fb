"""
Utility script to generate and write the OpenAPI schema for the FastAPI app.

The schema is serialized so API clients and documentation tools can consume
a stable spec without running the server.

Usage:
    python -m task_tracker.generate_openapi [output_path]

Notes:
- Every tag declared in main.openapi_tags is present in the written schema.
- The default output path is interfaces/openapi.json under the current directory.
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .main import create_app, openapi_tags
from .settings import get_settings

DEFAULT_OUTPUT = Path("interfaces") / "openapi.json"


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Ensure the OpenAPI schema contains the expected tags metadata. This does not
    override existing tag definitions unless missing.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(output_path: Optional[Path] = None) -> Path:
    """Generate the OpenAPI schema file and return the written file path."""
    out_path = Path(output_path) if output_path is not None else DEFAULT_OUTPUT
    schema = create_app(get_settings()).openapi()
    _ensure_tags(schema)

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    return out_path


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    path = generate_openapi(Path(args[0]) if args else None)
    print(f"Wrote OpenAPI schema to: {path}")


if __name__ == "__main__":
    main()
