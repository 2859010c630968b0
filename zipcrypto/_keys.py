# Copyright (c) 2018 Jonathan Koch
#
# Permission is hereby granted, free of charge, to any person obtaining a copy of
# this software and associated documentation files (the "Software"), to deal in
# the Software without restriction, including without limitation the rights to
# use, copy, modify, merge, publish, distribute, sublicense, and/or sell copies
# of the Software, and to permit persons to whom the Software is furnished to do
# so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

# Based on https://github.com/devthat/zipencrypt.

from typing import Self

from .constants import CRC32_POLYNOMIAL, INT32_MAX, KEY0, KEY1, KEY2, KEY_MULTIPLIER


def generate_crc_table() -> tuple[int, ...]:
    """Generate a CRC-32 table.

    ZIP encryption uses the CRC32 one-byte primitive for scrambling some internal keys.
    """
    table = [0] * 256
    for i in range(256):
        crc = i
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ CRC32_POLYNOMIAL
            else:
                crc >>= 1
        table[i] = crc
    return tuple(table)

CRC32_TABLE: tuple[int, ...] = generate_crc_table()


def crc32_update(crc: int, c: int) -> int:
    """Compute the CRC32 primitive on one byte."""
    return CRC32_TABLE[(crc ^ c) & 0xff] ^ (crc >> 8)


class KeyState:

    """Three 32-bit keys of the traditional PKWARE encryption.

    ZIP supports a password-based form of encryption. Even though known
    plaintext attacks have been found against it, it is still useful
    to be able to get data in and out of such a file.

    Every byte of the header and of the payload advances the keys, so one
    instance must only ever serve a single stream.

    Usage:
        ks = KeyState(b'mypwd')
        ks.decrypt_into(buffer)  # in place
        cipher_text = ks.encrypt(plain_text)
    """

    __slots__ = ('key0', 'key1', 'key2')

    def __init__(self, password: bytes | str = b''):
        self.init(password)

    def init(self, password: bytes | str) -> None:
        """Reset keys to their initial values and fold ``password`` into them."""
        if isinstance(password, str):
            password = password.encode('utf-8')
        self.key0 = KEY0
        self.key1 = KEY1
        self.key2 = KEY2
        for c in password:
            self.update(c)

    @property
    def keys(self) -> tuple[int, int, int]:
        return self.key0, self.key1, self.key2

    def copy(self) -> Self:
        other = self.__class__.__new__(self.__class__)
        other.key0, other.key1, other.key2 = self.keys
        return other

    def update(self, c: int) -> None:
        self.key0 = crc32_update(self.key0, c)
        self.key1 = (self.key1 + (self.key0 & 0xff)) & INT32_MAX
        self.key1 = (self.key1 * KEY_MULTIPLIER + 1) & INT32_MAX
        self.key2 = crc32_update(self.key2, self.key1 >> 24)

    def keystream_byte(self) -> int:
        k = self.key2 | 2
        return ((k * (k ^ 1)) >> 8) & 0xff

    def decrypt_into(self, buffer: bytearray | memoryview) -> None:
        """Decrypt ``buffer`` in place."""
        for i, c in enumerate(buffer):
            c ^= self.keystream_byte()
            buffer[i] = c
            self.update(c)

    def encrypt(self, data: bytes | bytearray | memoryview) -> bytearray:
        """Encrypt ``data`` into a new buffer. ``data`` itself is left untouched."""
        encrypted = bytearray(len(data))
        for i, c in enumerate(data):
            encrypted[i] = c ^ self.keystream_byte()
            self.update(c)  # keys follow the plain byte, same as when decrypting
        return encrypted

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}>'
