"""Failure variants raised while storing a file.

Every variant carries a short `kind` tag so callers can branch on the failure
without parsing message text. The store handler converts all of them into a
failed response at its boundary.
"""
from typing import Optional


class StoreError(Exception):
    kind = 'store'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    kind = 'validation'

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AvailabilityError(StoreError):
    kind = 'availability'


class SizeError(StoreError):
    kind = 'size'


class ChecksumMismatchError(StoreError):
    kind = 'checksum_mismatch'

    def __init__(self, expected: str, calculated: str):
        super().__init__(
            f"The sha256 for the file is incorrect '{expected}' was sent "
            f"but it has been calculated as '{calculated}'")
        self.expected = expected
        self.calculated = calculated


class ConfigParseError(StoreError):
    kind = 'config_parse'


class UploadError(StoreError):
    kind = 'upload'


class TransactionComposeError(StoreError):
    kind = 'transaction_compose'


class TransactionSubmitError(StoreError):
    kind = 'transaction_submit'


def error_kind(exc: BaseException) -> str:
    """Tag for an exception; anything outside the taxonomy is 'internal'."""
    if isinstance(exc, StoreError):
        return exc.kind
    return 'internal'
