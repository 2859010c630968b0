"""Traditional PKWARE encryption (ZipCrypto) for zip archive entries.

Entries are encrypted and decrypted as streams: wrap the raw data area of an entry
with :class:`DecryptingStream` or :class:`EncryptingStream` and read or write it.
"""

from ._entry import EntryMetadata, check_byte, dos_date, dos_time
from ._keys import CRC32_TABLE, KeyState
from ._zip_algorythms import decrypt, encrypt
from .constants import *
from .exceptions import *
from .reader import DecryptingStream
from .writer import EncryptingStream

__version__ = '1.0.0'
