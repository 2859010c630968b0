import io
import logging
from errno import EAGAIN
from typing import BinaryIO, Optional, Self

from ._entry import EntryMetadata, check_byte
from ._keys import KeyState
from .constants import ENCRYPTION_HEADER_SIZE
from .exceptions import InvalidPasswordError, NotEncryptedError

log = logging.getLogger(__name__)


class DecryptingStream(io.RawIOBase):
    """Decrypts data of an encrypted entry as it is read from ``source``.

    ``source`` must be positioned at the start of the entry's data area. Each encrypted
    entry has an extra 12 bytes stored at the start of the data area defining the
    encryption header. It is consumed on the first read and its last byte is compared
    against the entry ``metadata`` to check the password.

    The stream doesn't own ``source``, closing it leaves ``source`` open.
    After :class:`InvalidPasswordError` the keys have already consumed the header,
    so the stream can't be used anymore.
    """

    def __init__(
            self,
            metadata: Optional[EntryMetadata],
            source: BinaryIO,
            password: bytes | str,
            *,
            _verify: bool = True
    ):
        if _verify and metadata is None:
            raise TypeError('Entry metadata is required. Use DecryptingStream.unverified to skip the password check.')
        if _verify and not metadata.encrypted:
            raise NotEncryptedError('Entry is not encrypted.')
        super().__init__()
        self._metadata: Optional[EntryMetadata] = metadata if _verify else None
        self._source: BinaryIO = source
        self._keys: KeyState = KeyState(password)
        self._header_read: bool = False

    @classmethod
    def unverified(cls, source: BinaryIO, password: bytes | str) -> Self:
        """Create a stream that accepts any password.

        The encryption header is still consumed, but its check byte is ignored, so
        a wrong password silently produces garbage. Use it only when metadata of the
        entry is not known yet.
        """
        return cls(None, source, password, _verify=False)

    @property
    def verified(self) -> bool:
        """False if the stream was created with :meth:`unverified`."""
        return self._metadata is not None

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> Optional[int]:
        """Read into ``b`` and decrypt it in place. Returns number of bytes read."""

        if self.closed:
            raise ValueError('I/O operation on closed file.')
        if not self._header_read:
            self._header_read = True
            self._read_header()

        view = memoryview(b).cast('B')
        n = self._read_source(view)
        if n:
            self._keys.decrypt_into(view[:n])
        return n

    def _read_source(self, view: memoryview) -> Optional[int]:
        readinto = getattr(self._source, 'readinto', None)
        if readinto is not None:
            return readinto(view)

        data = self._source.read(len(view))
        if data is None:
            return None
        view[:len(data)] = data
        return len(data)

    def _read_header(self) -> None:
        header = bytearray(ENCRYPTION_HEADER_SIZE)
        view = memoryview(header)
        pos = 0
        while pos < ENCRYPTION_HEADER_SIZE:
            n = self._read_source(view[pos:])
            if n is None:
                raise BlockingIOError(EAGAIN, 'Source is not ready to provide the encryption header.')
            if n == 0:
                raise EOFError(f'Encryption header is truncated, got {pos} of {ENCRYPTION_HEADER_SIZE} bytes.')
            pos += n

        self._keys.decrypt_into(header)

        if self._metadata is None:
            log.debug('Encryption header consumed without password verification.')
            return

        # After the header is decrypted, the last byte SHOULD be the high-order byte
        # of the CRC (or of the modification time if data descriptor is used).
        if header[-1] != check_byte(self._metadata):
            log.debug('Encryption header check byte mismatch.')
            raise InvalidPasswordError('Given password is incorrect.')
        log.debug('Encryption header verified.')
