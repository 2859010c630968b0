from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Self
from zipfile import ZipInfo
from zlib import crc32

from .constants import FLAG_DATA_DESCRIPTOR, FLAG_ENCRYPTED


def dos_time(value: datetime | tuple[int, int, int, int, int, int]) -> int:
    """Pack time of ``value`` the way MS-DOS does. Seconds are stored halved.

    ``value`` is either a datetime or a ``ZipInfo.date_time`` tuple.
    """
    if isinstance(value, tuple):
        _, _, _, hour, minute, second = value
    else:
        hour, minute, second = value.hour, value.minute, value.second
    # This conversion is based on java8 source code.
    return hour << 11 | minute << 5 | second >> 1

def dos_date(value: datetime) -> int:
    """Pack date of ``value`` the way MS-DOS does. Years are counted from 1980."""
    return (value.year - 1980) << 9 | value.month << 5 | value.day


@dataclass(frozen=True)
class EntryMetadata:
    """Fields of the archive entry the encryption depends on.

    **Attributes**:
        * flags (`int`): General purpose bit flag of the entry.
        * modified_time (`int`): Last modification time in MS-DOS format.
        * crc32 (`int`): CRC of the uncompressed data.
    """

    flags: int
    modified_time: int
    crc32: int

    @property
    def encrypted(self) -> bool:
        return bool(self.flags & FLAG_ENCRYPTED)

    @property
    def has_data_descriptor(self) -> bool:
        return bool(self.flags & FLAG_DATA_DESCRIPTOR)

    @classmethod
    def from_zipinfo(cls, info: ZipInfo) -> Self:
        """Take metadata from standard library's ``ZipInfo``."""
        return cls(info.flag_bits, dos_time(info.date_time), info.CRC)

    @classmethod
    def for_data(
            cls,
            data: bytes,
            modified: Optional[datetime] = None,
            *,
            data_descriptor: bool = False
    ) -> Self:
        """Metadata for ``data`` that is about to be encrypted.
        If ``modified`` is not specified, current time is used.
        """

        flags = FLAG_ENCRYPTED
        if data_descriptor:
            flags |= FLAG_DATA_DESCRIPTOR
        return cls(flags, dos_time(modified or datetime.now()), crc32(data))


def check_byte(metadata: EntryMetadata) -> int:
    """Last byte of the encryption header.

    It SHOULD be the high-order byte of the CRC, but if the entry has a data descriptor
    the CRC is not known before the data is written, so the high-order byte of
    the modification time is used instead.
    """
    if metadata.has_data_descriptor:
        return (metadata.modified_time >> 8) & 0xff
    return (metadata.crc32 >> 24) & 0xff
