"""Exception types raised by the publishing pipeline.

Lower-level I/O and network errors are not wrapped; they propagate
unchanged to the caller.
"""


class AssetValidationError(ValueError):
    """Asset metadata violates a construction invariant."""


class SchemaError(ValueError):
    """An emitted record does not conform to its JSON Schema.

    Attributes:
        path: Location of the offending value inside the record
    """

    def __init__(self, message: str, path: str = "root"):
        super().__init__(message)
        self.path = path


class TransferError(RuntimeError):
    """The remote store rejected or failed a request.

    Attributes:
        cid: Content identifier the request was keyed by
        status_code: HTTP status returned by the store, if any
    """

    def __init__(self, message: str, cid: str = "", status_code: int | None = None):
        super().__init__(message)
        self.cid = cid
        self.status_code = status_code
