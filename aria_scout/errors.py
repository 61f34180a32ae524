# aria_scout/errors.py
"""Exception hierarchy shared by the scanner, crawler and outer surfaces."""


class AriaError(Exception):
    """Base class for all aria_scout errors."""


class ConfigurationError(AriaError):
    """Invalid flag, URL or configuration file."""


class BrowserLaunchError(AriaError):
    """The browser process could not be started."""


class NavigationError(AriaError):
    """Page navigation timed out or failed at the network level."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url
        self.reason = reason


class EngineInjectionError(AriaError):
    """axe-core could not be loaded into the page or failed while running."""


class RuleExecutionError(AriaError):
    """A single custom rule raised while inspecting a page."""

    def __init__(self, rule_id: str, cause: BaseException) -> None:
        super().__init__(f"Custom rule '{rule_id}' failed: {cause}")
        self.rule_id = rule_id
        self.cause = cause


class PersistenceError(AriaError):
    """The result store could not read or write a result."""


class RenderError(AriaError):
    """A report could not be rendered or written."""


__all__ = [
    "AriaError",
    "ConfigurationError",
    "BrowserLaunchError",
    "NavigationError",
    "EngineInjectionError",
    "RuleExecutionError",
    "PersistenceError",
    "RenderError",
]
