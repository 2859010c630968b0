"""Constants of the traditional PKWARE encryption: flag bits, initial keys and header size."""

# General purpose bit flag
FLAG_ENCRYPTED: int = 0x1
FLAG_DATA_DESCRIPTOR: int = 0x8

# Initial values of the three 32-bit keys
KEY0: int = 0x12345678  # 305419896
KEY1: int = 0x23456789  # 591751049
KEY2: int = 0x34567890  # 878082192

CRC32_POLYNOMIAL: int = 0xEDB88320
INT32_MAX: int = 0xFFFFFFFF
KEY_MULTIPLIER: int = 134775813

ENCRYPTION_HEADER_SIZE: int = 12
