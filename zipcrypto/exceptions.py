class ZipCryptoException(Exception):
    """Base class for all zipcrypto exceptions."""

class EncryptionError(ZipCryptoException):
    """Base class for all encryption related exceptions."""

class NotEncryptedError(EncryptionError):
    """Entry is not encrypted, there is nothing to decrypt."""

class InvalidHeaderError(EncryptionError):
    """Entry metadata can't be used for encryption."""

class EncryptionFlagNotSetError(InvalidHeaderError):
    """Entry metadata doesn't have the encryption flag set."""

class InvalidPasswordError(EncryptionError):
    """Given password is incorrect."""
