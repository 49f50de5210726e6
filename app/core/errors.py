"""
Exceptions raised while building or reading the server configuration.

Everything here is fatal at call time. Missing or malformed optional settings
are defaulted by the loader instead of raising.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base class for configuration failures."""


class ConfigNotInitializedError(ConfigError):
    def __init__(self) -> None:
        super().__init__("Config has not been initialized!")


class InvalidNumberError(ConfigError, ValueError):
    """A numeric environment variable holds non-numeric text."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid number: {value}")
        self.value = value


class UnknownRouteTypeError(ConfigError, ValueError):
    def __init__(self, route_type: object) -> None:
        super().__init__(f"Unknown type: {route_type}")
        self.route_type = route_type


class UnknownOverrideError(ConfigError, TypeError):
    def __init__(self, names: list[str]) -> None:
        super().__init__(f"Unknown config override(s): {', '.join(sorted(names))}")
        self.names = names


class InvalidStripeEnvError(ConfigError):
    def __init__(self, env: str) -> None:
        super().__init__(f"Invalid env: {env}")
        self.env = env


class PriceNotFoundError(ConfigError):
    def __init__(self, account_type: int, period: str) -> None:
        super().__init__(f"Could not find price for: {account_type}: {period}")
        self.account_type = account_type
        self.period = period
