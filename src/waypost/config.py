"""Dispatcher configuration.

DispatcherConfig is a frozen dataclass, immutable after creation and
validated once, so a dispatcher never has to re-check its options.
"""

from dataclasses import dataclass

from waypost.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class DispatcherConfig:
    """Dispatcher configuration. Immutable after creation.

    ``path_property`` names the input field holding a routable path.
    Leave it unset to disable mount paths for the whole dispatcher::

        config = DispatcherConfig(path_property="url")
    """

    path_property: str | None = None

    def __post_init__(self) -> None:
        if self.path_property is None:
            return
        if not isinstance(self.path_property, str):
            kind = type(self.path_property).__name__
            msg = f"Expected path_property to be a string but was: {kind}"
            raise ConfigurationError(msg)
        if not self.path_property:
            msg = "Expected path_property to not be empty"
            raise ConfigurationError(msg)

    @property
    def original_path_property(self) -> str | None:
        """Field name holding the unstripped path, e.g. ``originalUrl``."""
        if self.path_property is None:
            return None
        prop = self.path_property
        return "original" + prop[0].upper() + prop[1:]
