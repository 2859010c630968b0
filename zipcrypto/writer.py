import io
import logging
from os import urandom
from typing import BinaryIO, Optional

from ._entry import EntryMetadata, check_byte
from ._keys import KeyState
from .constants import ENCRYPTION_HEADER_SIZE
from .exceptions import EncryptionFlagNotSetError

log = logging.getLogger(__name__)


class EncryptingStream(io.RawIOBase):
    """Encrypts data of an entry as it is written to ``sink``.

    The entry ``metadata`` must be filled out before the stream is created, including
    the encryption flag, the CRC (or modification time if data descriptor is used)
    and the compressed size, which must be 12 bytes larger than the actual value to
    make room for the encryption header. The header is written before the first chunk
    of data, or on explicit close if nothing was written. A stream that is just
    dropped writes nothing.

    The stream doesn't own ``sink``, closing it leaves ``sink`` open.
    """

    _sink: Optional[BinaryIO] = None
    _header_written: bool = False
    _finalizing: bool = False

    def __init__(self, metadata: EntryMetadata, sink: BinaryIO, password: bytes | str):
        if not metadata.encrypted:
            raise EncryptionFlagNotSetError('Encryption flag is not set.')
        super().__init__()
        self._metadata: EntryMetadata = metadata
        self._sink = sink
        self._keys: KeyState = KeyState(password)

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        """Encrypt ``b`` and write it to the sink. ``b`` itself is never modified."""

        if self.closed:
            raise ValueError('I/O operation on closed file.')
        if not self._header_written:
            self._write_header()

        encrypted = self._keys.encrypt(memoryview(b).cast('B'))
        self._write_all(encrypted)
        return len(encrypted)

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self._sink is not None and not self._header_written and not self._finalizing:
                # Entry without data still carries the header
                self._write_header()
        finally:
            super().close()

    def __del__(self) -> None:
        # Sink may already hold the next entry, so only explicit close writes the header
        self._finalizing = True
        super().__del__()

    def _write_header(self) -> None:
        self._header_written = True

        # The encryption header is originally set to random values, and then
        # itself encrypted, using three, 32-bit keys.
        header = bytearray(urandom(ENCRYPTION_HEADER_SIZE - 1))
        header.append(check_byte(self._metadata))
        self._write_all(self._keys.encrypt(header))
        log.debug(
            'Encryption header written, check byte taken from %s.',
            'modification time' if self._metadata.has_data_descriptor else 'CRC'
        )

    def _write_all(self, data: bytearray) -> None:
        n = self._sink.write(data)
        if n is None or n < len(data):
            raise OSError(f'Short write, sink accepted {n} of {len(data)} bytes.')
