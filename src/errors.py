"""Exception types surfaced by the extractor."""


class LandTitleError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(LandTitleError):
    """Required settings are missing or a setting has an invalid value."""


class ImageReadError(LandTitleError):
    """A local image could not be found or read."""


class AnalysisFailure(LandTitleError):
    """The only error type that leaves AnalysisClient.analyze."""


class ConversionError(LandTitleError):
    """An external PDF/image tool failed."""
