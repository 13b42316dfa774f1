"""Error taxonomy for HomeFix."""


class HomeFixError(Exception):
    """Base class for all HomeFix errors."""


class ConfigurationError(HomeFixError):
    """Raised at startup when required configuration is missing or invalid."""


class TransportError(HomeFixError):
    """Raised when the model service cannot be reached or reports a failure."""


class ValidationError(HomeFixError):
    """Raised when the model reply does not match the repair guide schema."""


class PersistenceReadError(HomeFixError):
    """Raised when persisted session data cannot be read back."""


class InvalidImageError(HomeFixError, ValueError):
    """Raised when the supplied image is empty or not a supported format."""


class AnalysisInProgressError(HomeFixError):
    """Raised when an analysis is requested while another is in flight."""
