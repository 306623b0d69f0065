"""App import resolution: resolves ``"module:attribute"`` strings to App instances.

Shared utility used by ``vertebrae routes`` and ``vertebrae check`` to
locate an app from a user-supplied import string.
"""

import importlib

from vertebrae.app import App


def resolve_app(import_string: str) -> App:
    """Resolve an import string to a vertebrae App instance.

    Accepts ``"module:attribute"`` format.  When the attribute portion
    is omitted, defaults to ``"app"`` (e.g. ``"myapp"`` resolves to
    ``myapp.app``).

    App subclasses and factory functions are called with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not an App or callable.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "app"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    # App subclasses and factory functions - call them to get an instance
    if callable(obj) and not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a vertebrae.App instance"
        raise TypeError(msg)

    return obj
