"""
Exceptions for bluedot operations.
"""


class BluedotError(Exception):
    """Base exception for bluedot-related errors."""

    pass


class WaterbodyNotFoundError(BluedotError):
    """The data service answered with a 4xx status (unknown waterbody id)."""

    def __init__(self, message: str, status_code: int = 404):
        super().__init__(message)
        self.status_code = status_code


# 4xx responses are reported as a single client-error kind
ClientError = WaterbodyNotFoundError


class TransientFetchError(BluedotError):
    """Network failure, timeout or 5xx response from the data service."""

    pass


class BluedotResponseError(BluedotError):
    """Response body could not be decoded or has an unexpected shape."""

    pass


class EmptyMeasurementsError(BluedotError):
    """No measurement survived validation, so no date can be navigated to."""

    def __init__(self, waterbody_id: int):
        super().__init__(f"Waterbody #{waterbody_id} has no valid measurements")
        self.waterbody_id = waterbody_id


class InvalidSelectionError(BluedotError):
    """A date was selected for a waterbody whose detail is not loaded."""

    pass
