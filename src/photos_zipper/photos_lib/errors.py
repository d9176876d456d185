"""Error types raised inside the photos archive engine."""


class PhotosError(Exception):
    pass


class TransportError(PhotosError):
    """A fetch failed at the network level or returned a non-success status."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{reason} ({url})")
        self.url = url
        self.reason = reason


class ParseError(PhotosError):
    pass


class CapabilityUnavailable(PhotosError):
    """The archive backend could not be loaded; callers must pick the sequential fallback."""


class UserFacingFailure(PhotosError):
    """Nothing could be done; the message is shown to the user as-is."""


class OperationBusy(PhotosError):
    pass
