"""
Agent request signals.

Each request to the agent opens with a single signal byte, optionally
followed by a payload.
"""

from enum import IntEnum

# binary.MaxVarintLen64 on the agent side; setgc payloads are padded to it
MAX_VARINT_LEN64 = 10


class Signal(IntEnum):
    """Request kinds understood by the agent."""
    STACK_TRACE = 0x1
    GC = 0x2
    MEM_STATS = 0x3
    VERSION = 0x4
    HEAP_PROFILE = 0x5
    CPU_PROFILE = 0x6
    STATS = 0x7
    TRACE = 0x8
    BINARY_DUMP = 0x9
    SET_GC_PERCENT = 0x10


def encode_varint(value: int) -> bytes:
    """
    Encode a signed integer as a zig-zag varint padded with zeros to
    MAX_VARINT_LEN64 bytes.
    """
    if not -(1 << 63) <= value < (1 << 63):
        raise ValueError(f"{value} does not fit in 64 bits")

    unsigned = ((value << 1) ^ (value >> 63)) & 0xFFFFFFFFFFFFFFFF
    out = bytearray()
    while unsigned >= 0x80:
        out.append((unsigned & 0x7F) | 0x80)
        unsigned >>= 7
    out.append(unsigned)
    return bytes(out).ljust(MAX_VARINT_LEN64, b"\x00")
