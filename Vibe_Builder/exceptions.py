"""
Exception hierarchy for Vibe Builder

ConfigurationError is fatal for a request. Everything under GenerationError is
recovered inside the pipeline by switching to the deterministic fallback.
"""


class VibeBuilderError(Exception):
    """Base class for all service errors"""


class ConfigurationError(VibeBuilderError):
    """Provider credential or other required setting is missing"""


class GenerationError(VibeBuilderError):
    """Model generation did not produce a usable app description"""


class GenerationTimeoutError(GenerationError, TimeoutError):
    """No model response arrived before the deadline"""


class UpstreamError(GenerationError):
    """Transport, auth or rate-limit failure reported by the provider"""


class EmptyResponseError(GenerationError):
    """Provider answered without any text content block"""


class MalformedResponseError(GenerationError, ValueError):
    """Model text is not a JSON object with the required keys"""


class GalleryStoreError(VibeBuilderError):
    """Gallery backend failed to read or write"""
