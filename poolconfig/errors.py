class ConfigError(ValueError):
    """Base class for every rejection of a configuration document."""


class DecodeError(ConfigError):
    """The raw document is not well-formed YAML or is not a mapping."""


class MissingFieldError(ConfigError):
    """A required key is absent."""


class MalformedValueError(ConfigError):
    """A value is present but does not parse into its target type."""


class RangeViolationError(ConfigError):
    """A numeric value lies outside its valid domain."""


class ConsistencyError(ConfigError):
    """A value is well-formed but conflicts with the rest of the document."""
