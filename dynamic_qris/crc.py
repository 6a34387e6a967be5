"""CRC-16/CCITT-FALSE used by the QRIS switching network."""
from __future__ import annotations

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF


def crc16_ccitt_false(data: str | bytes) -> int:
    """Compute CRC-16/CCITT-FALSE (poly 0x1021, init 0xFFFF, no reflection, no xorout)."""

    if isinstance(data, str):
        data = data.encode("utf-8")

    checksum = CRC16_INIT
    for byte in data:
        checksum ^= byte << 8
        for _ in range(8):
            if checksum & 0x8000:
                checksum = (checksum << 1) ^ CRC16_POLY
            else:
                checksum <<= 1
            checksum &= 0xFFFF
    return checksum


def crc16_hex(data: str | bytes) -> str:
    return f"{crc16_ccitt_false(data):04X}"
