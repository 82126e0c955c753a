"""Tests for USB string descriptor generation."""

from ofsbuild.descriptors import encode_string_descriptor, format_descriptor


class TestEncodeStringDescriptor:
    def test_single_character(self):
        assert encode_string_descriptor("A") == [4, 3, 65, 0]

    def test_two_characters(self):
        assert encode_string_descriptor("AB") == [6, 3, 65, 0, 66, 0]

    def test_empty_string(self):
        assert encode_string_descriptor("") == [2, 3]

    def test_manufacturer_string(self):
        assert encode_string_descriptor("OFS") == [8, 3, 0x4F, 0x00, 0x46, 0x00, 0x53, 0x00]

    def test_latin1_character(self):
        assert encode_string_descriptor("é") == [4, 3, 0xE9, 0]

    def test_code_points_above_255_are_truncated(self):
        # U+0141 keeps only its low byte
        assert encode_string_descriptor("Ł") == [4, 3, 0x41, 0]


class TestFormatDescriptor:
    def test_format(self):
        assert format_descriptor([8, 3, 0x4F, 0x00, 0x46, 0x00, 0x53, 0x00]) == (
            "[8, 3, 0x4f, 0x00, 0x46, 0x00, 0x53, 0x00]"
        )

    def test_long_descriptor_length_is_decimal(self):
        text = format_descriptor(encode_string_descriptor("Open Fight Stick v2a"))
        assert text.startswith("[42, 3, 0x4f, 0x00, 0x70, 0x00")
        assert text.endswith("0x61, 0x00]")
