"""Exception types shared across herostats."""


class HeroStatsError(Exception):
    """Base class for herostats errors."""


class ValidationError(HeroStatsError, ValueError):
    """Caller passed an empty player id or nickname."""


class StoreError(HeroStatsError):
    """A bookmark backing store could not complete a call."""


class PrimaryUnavailable(StoreError):
    pass


class FallbackUnavailable(StoreError):
    pass


class StatsAPIError(HeroStatsError):
    """Remote statistics API failed or answered with a non-200 code."""


class ConfigError(HeroStatsError):
    pass
