"""``vertebrae routes``: list registered routes.

Resolves an import string to an App and prints every route pattern with
the controller it maps to.
"""

import argparse
import sys

from vertebrae.cli._resolve import resolve_app


def controller_label(ref: object) -> str:
    """Readable name for a controller class or lazy import string."""
    if isinstance(ref, str):
        return f"{ref} (lazy)"
    return getattr(ref, "__qualname__", repr(ref))


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of PATTERN and CONTROLLER for ``args.app``."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    table = app.route_table
    if not table:
        print("No routes registered.")
        return

    rows = [(pattern or "(root)", controller_label(ref)) for pattern, ref in table.items()]
    max_pattern = max(max(len(r[0]) for r in rows), 7)  # "PATTERN" header

    fmt = f"{{:<{max_pattern}}}  {{}}"
    print(fmt.format("PATTERN", "CONTROLLER"))
    sep_len = max_pattern + 2 + max(len(r[1]) for r in rows)
    print("-" * min(sep_len, 80))
    for pattern, label in rows:
        print(fmt.format(pattern, label))
