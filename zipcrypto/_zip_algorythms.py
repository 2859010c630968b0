from io import BytesIO

from ._entry import EntryMetadata
from .reader import DecryptingStream
from .writer import EncryptingStream


def encrypt(metadata: EntryMetadata, password: bytes | str, data: bytes) -> bytes:
    """Encrypt ``data``. Returns encryption header followed by encrypted data."""

    sink = BytesIO()
    with EncryptingStream(metadata, sink, password) as stream:
        stream.write(data)
    return sink.getvalue()

def decrypt(metadata: EntryMetadata, password: bytes | str, data: bytes) -> bytes:
    """Decrypt ``data`` that starts with the encryption header. Returns decrypted data."""

    with DecryptingStream(metadata, BytesIO(data), password) as stream:
        return stream.readall()
