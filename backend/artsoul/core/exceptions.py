class ArtSoulError(Exception):
    """Base exception for the quiz service."""
    pass


class InvalidInputError(ArtSoulError, ValueError):
    """Invalid catalog data, trait values or quiz answers."""
    pass


class ServiceUnavailableError(ArtSoulError):
    """The AI text service is not configured or the call failed."""
    pass


class MalformedResponseError(ArtSoulError):
    """The AI text service returned an empty or unparseable body."""
    pass
