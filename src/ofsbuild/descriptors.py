"""
USB string descriptor generation.

Produces the byte array for a USB string descriptor so it can be pasted into
the firmware's descriptor table, e.g. "OFS" becomes

    [8, 3, 0x4f, 0x00, 0x46, 0x00, 0x53, 0x00]

Each character is written as its code point followed by a zero byte. This is
UTF-16LE only for code points below 256; higher code points are truncated to
their low byte, so keep descriptor strings Latin-1.
"""

from typing import List

STRING_DESCRIPTOR_TYPE = 3


def encode_string_descriptor(text: str) -> List[int]:
    """
    Encode text as a USB string descriptor.

    Args:
        text: Descriptor string

    Returns:
        [bLength, bDescriptorType, low0, 0, low1, 0, ...]
    """
    data = [2 * len(text) + 2, STRING_DESCRIPTOR_TYPE]
    for char in text:
        data.append(ord(char) & 0xFF)
        data.append(0)
    return data


def format_descriptor(data: List[int]) -> str:
    """Format a descriptor as an array literal (header decimal, payload hex)."""
    header = [str(value) for value in data[:2]]
    payload = [f"0x{value:02x}" for value in data[2:]]
    return "[" + ", ".join(header + payload) + "]"
