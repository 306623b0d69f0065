"""Controller contract and base class.

A controller is one page of the application. The app constructs a fresh
instance per navigation, attaches it to the shared container, starts
it with the route arguments, and later unloads and destroys it.

No base class is required. The app checks the shape, not the lineage.
Anything matching :class:`ControllerLike` works. :class:`Controller`
provides the defaults::

    class UserPage(Controller):
        name = "User Page"

        async def start(self, user_id: int) -> None:
            self.user = await load_user(user_id)
            self.container.append(self.user.name)
"""

from typing import Any, Protocol, runtime_checkable

from vertebrae.view import Container


@runtime_checkable
class ControllerLike(Protocol):
    """What the app needs from a controller.

    ``start``, ``unload`` and ``destroy`` may be sync or async.
    ``display_name`` and ``id`` may be ``None``.
    """

    id: str | None

    @property
    def display_name(self) -> str | None: ...

    def setup_view_properties(self, container: Container) -> None: ...

    def start(self, *args: Any) -> Any: ...

    def unload(self) -> Any: ...

    def destroy(self) -> Any: ...


class Controller:
    """Default controller implementation.

    Class attributes:
        name: Display name; becomes a CSS class on the container.
        content_name: Fallback display name when ``name`` is unset.
        id: Element id applied to the container.
    """

    name: str | None = None
    content_name: str | None = None
    id: str | None = None

    def __init__(self) -> None:
        self.container: Container | None = None

    @property
    def display_name(self) -> str | None:
        return self.name or self.content_name

    def setup_view_properties(self, container: Container) -> None:
        """Bind the controller to the app's content container."""
        self.container = container

    def start(self, *args: Any) -> Any:
        return None

    def unload(self) -> Any:
        return True

    def destroy(self) -> Any:
        self.container = None
        return True
