"""``vertebrae check``: import every lazy controller up front.

Lazy controllers are normally imported on first navigation, so a typo
in an import string only shows up when a user opens that page. This
command imports them all and exits with code 1 if any fail.
"""

import argparse
import sys

from vertebrae.cli._resolve import resolve_app
from vertebrae.errors import ControllerLoadError
from vertebrae.loading import import_controller


def run_check(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and import each string controller reference.

    Uses the app's ``get_controller_path`` hook, which must be
    synchronous for this command.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    failures: list[tuple[str, ControllerLoadError]] = []
    checked = 0
    for pattern, ref in app.route_table.items():
        if not isinstance(ref, str):
            continue
        checked += 1
        try:
            import_controller(app.get_controller_path(ref), app.config.controller_attribute)
        except ControllerLoadError as exc:
            failures.append((pattern, exc))

    for pattern, exc in failures:
        print(f"FAIL  {pattern or '(root)'}: {exc}")

    print(f"{checked - len(failures)}/{checked} lazy controller(s) loaded.")
    if failures:
        raise SystemExit(1)
