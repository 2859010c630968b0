import io
import struct
import unittest
import zipfile
from datetime import datetime

from zipcrypto import *

# Layouts of the records from APPNOTE.TXT
LOCAL_HEADER = struct.Struct('<4s2B4HL2L2H')
CD_HEADER = struct.Struct('<4s4B4HL2L5H2L')
CD_END = struct.Struct('<4s4H2LH')


def build_archive(filename: str, data: bytes, password: bytes, modified: datetime, data_descriptor: bool) -> bytes:
    """Archive with a single stored entry encrypted with ``password``."""

    metadata = EntryMetadata.for_data(data, modified, data_descriptor=data_descriptor)
    contents = encrypt(metadata, password, data)
    name = filename.encode('ascii')
    date = dos_date(modified)

    local_header = LOCAL_HEADER.pack(
        b'PK\x03\x04', 20, 0, metadata.flags, 0, metadata.modified_time, date,
        metadata.crc32, len(contents), len(data), len(name), 0
    )
    central_directory = CD_HEADER.pack(
        b'PK\x01\x02', 20, 0, 20, 0, metadata.flags, 0, metadata.modified_time, date,
        metadata.crc32, len(contents), len(data), len(name), 0, 0, 0, 0, 0, 0
    ) + name
    offset = len(local_header) + len(name) + len(contents)
    end = CD_END.pack(b'PK\x05\x06', 0, 0, 1, 1, len(central_directory), offset, 0)
    return local_header + name + contents + central_directory + end


class TestStandardLibrary(unittest.TestCase):

    def setUp(self) -> None:
        self.test_str: bytes = b'Et nesciunt aliquam rem eius inventore aut distinctio esse ut excepturi amet.' * 20
        self.modified = datetime(2024, 5, 17, 13, 45, 30)

    def test_read_encrypted_entry(self) -> None:
        for data_descriptor in (False, True):
            archive = build_archive('lorem.txt', self.test_str, b'verysecurepassword', self.modified, data_descriptor)
            with zipfile.ZipFile(io.BytesIO(archive)) as z:
                self.assertEqual(self.test_str, z.read('lorem.txt', pwd=b'verysecurepassword'))

    def test_wrong_password(self) -> None:
        archive = build_archive('lorem.txt', self.test_str, b'verysecurepassword', self.modified, False)
        with zipfile.ZipFile(io.BytesIO(archive)) as z:
            # Either the check byte or the CRC of garbage data doesn't match
            self.assertRaises((RuntimeError, zipfile.BadZipFile), lambda: z.read('lorem.txt', pwd=b'wrongpassword'))

    def test_metadata_from_zipinfo(self) -> None:
        for data_descriptor in (False, True):
            archive = build_archive('lorem.txt', self.test_str, b'secret', self.modified, data_descriptor)
            with zipfile.ZipFile(io.BytesIO(archive)) as z:
                info = z.getinfo('lorem.txt')
            metadata = EntryMetadata.from_zipinfo(info)
            self.assertEqual(EntryMetadata.for_data(self.test_str, self.modified, data_descriptor=data_descriptor), metadata)

            # Data area of the entry decrypted through the stream
            offset = LOCAL_HEADER.size + len('lorem.txt')
            source = io.BytesIO(archive[offset:offset + info.compress_size])
            with DecryptingStream(metadata, source, b'secret') as stream:
                self.assertEqual(self.test_str, stream.read())


if __name__ == '__main__':
    unittest.main()
