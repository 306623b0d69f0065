"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(default_route="home", controller_package="myapp.pages")
    """

    # Routing
    default_route: str = ""  # Fragment used by start() and failure recovery

    # Lazy controllers
    controller_package: str = ""  # Prefix joined onto lazy import strings
    controller_attribute: str = "Controller"  # Attribute used when the path has no ":attr"
    load_in_thread: bool = True  # Import lazy controllers in a worker thread

    # Transitions
    skip_superseded: bool = True  # Drop queued transitions a newer navigation replaced

    # Events
    event_queue_size: int = 256  # Per-subscriber buffer for events.subscribe()
