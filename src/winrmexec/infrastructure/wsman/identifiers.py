"""
Random UUIDs (version 4) as specified in RFC 4122, section 4.4.

Used as SOAP MessageID correlation ids.
"""

import os


def uuid4() -> str:
    """Return a lowercase, hyphenated version-4 UUID string."""
    raw = bytearray(os.urandom(16))
    # clock_seq_hi_and_reserved: two most significant bits set to 1 0
    raw[8] = raw[8] & 0x3F | 0x80
    # time_hi_and_version: four most significant bits set to 0 1 0 0
    raw[6] = raw[6] & 0x0F | 0x40
    text = raw.hex()
    return f"{text[0:8]}-{text[8:12]}-{text[12:16]}-{text[16:20]}-{text[20:32]}"
