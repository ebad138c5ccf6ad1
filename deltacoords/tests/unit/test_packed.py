"""
Unit tests for packed fields and wire-level helpers
"""

import io
import pytest

from deltacoords import DeltaBatch
from deltacoords.constants import MAX_GROUP_DEPTH
from deltacoords.context.encoding.packed import (
    decode_packed_payload,
    encode_packed,
    packed_field_size,
    packed_payload_size,
    read_packed,
    read_unpacked,
)
from deltacoords.context.encoding.wire import CodedInput, encode_tag, skip_field, split_tag
from deltacoords.exceptions import DeltaCodecError, MalformedVarint, TruncatedField, TruncatedPacked


class TestPackedEncoding:
    """Packed field encoding"""

    def test_empty_sequence_writes_nothing(self):
        assert encode_packed(2, [], 32) == b''
        assert packed_field_size(2, [], 32) == 0

    def test_exact_bytes(self):
        # tag 0x0a (field 1, length-delimited), 3 payload bytes
        assert encode_packed(1, [1, -1, 2], 64) == b'\x0a\x03\x02\x01\x04'

    def test_size_matches_encoding(self):
        values = [0, -1, 1000000, -850000000, 2**31 - 1]
        assert packed_field_size(3, values, 32) == len(encode_packed(3, values, 32))
        assert packed_payload_size(values, 32) == len(encode_packed(3, values, 32)) - 2

    def test_long_payload_uses_multibyte_length(self):
        values = list(range(200))  # 64 one-byte + 136 two-byte values
        data = encode_packed(2, values, 32)
        assert data[1:3] == b'\xd0\x02'  # 336
        assert len(data) == 1 + 2 + 336

    def test_stale_measurement_is_rejected(self):
        with pytest.raises(ValueError):
            encode_packed(1, [1, 2, 3], 64, payload_size=2)


class TestPackedDecoding:
    """Packed payload and stream decoding"""

    def test_decode_payload(self):
        assert decode_packed_payload(b'\x00\x01\x02\x80\x01', 32) == [0, -1, 1, 64]

    def test_empty_payload(self):
        assert decode_packed_payload(b'', 64) == []

    def test_value_crossing_boundary(self):
        with pytest.raises(TruncatedPacked) as exc_info:
            decode_packed_payload(b'\x02\x80', 64, field_number=1, base_offset=10)
        assert exc_info.value.field_number == 1
        assert exc_info.value.offset == 11

    def test_overlong_value_in_payload(self):
        with pytest.raises(MalformedVarint):
            decode_packed_payload(b'\xff' * 5 + b'\x01', 32)

    def test_read_packed_appends(self):
        target = [99]
        stream = CodedInput.from_bytes(b'\x03\x02\x01\x04')
        read_packed(stream, 1, 64, target)
        assert target == [99, 1, -1, 2]
        assert stream.at_end()

    def test_read_packed_length_past_input(self):
        stream = CodedInput.from_bytes(b'\x05\x02\x01')
        with pytest.raises(TruncatedPacked) as exc_info:
            read_packed(stream, 2, 32, [])
        assert exc_info.value.expected == 5
        assert exc_info.value.available == 2

    def test_read_unpacked(self):
        target = []
        stream = CodedInput.from_bytes(b'\x03\x04')
        read_unpacked(stream, 32, target)
        read_unpacked(stream, 32, target)
        assert target == [-2, 2]


class TestWire:
    """Tags, buffered input and unknown field skipping"""

    def test_tags(self):
        assert encode_tag(1, 2) == b'\x0a'
        assert encode_tag(2, 2) == b'\x12'
        assert encode_tag(3, 2) == b'\x1a'
        assert split_tag(0x22) == (4, 2)
        assert encode_tag(16, 0) == b'\x80\x01'

    def test_coded_input_over_small_chunks(self, chunked_reader):
        reader = chunked_reader(b'\xac\x02\x01\x02\x03', step=1)
        stream = CodedInput(reader, chunk_size=1)
        assert stream.read_varint(10) == 300
        assert stream.read_exact(3) == b'\x01\x02\x03'
        assert stream.at_end()
        assert stream.offset == 5

    def test_release_keeps_offsets_absolute(self):
        stream = CodedInput(io.BytesIO(b'\x01\x02\x03\x04'), chunk_size=2)
        stream.read_exact(2)
        stream.release()
        mark = stream.mark()
        stream.read_exact(1)
        assert stream.since(mark) == b'\x03'
        assert stream.offset == 3

    def test_reader_returning_none_means_end(self):
        class NoneReader:
            def read(self, size):
                return None

        assert CodedInput(NoneReader()).at_end()

    def test_read_rest(self, chunked_reader):
        stream = CodedInput(chunked_reader(b'abcdef', step=2), chunk_size=2)
        stream.read_exact(1)
        assert stream.read_rest() == b'bcdef'
        assert stream.at_end()

    def test_chunk_size_must_be_positive(self):
        with pytest.raises(ValueError):
            CodedInput(io.BytesIO(b''), chunk_size=0)

    @pytest.mark.parametrize("wire_type,payload", [
        (0, b'\x96\x01'),
        (1, b'12345678'),
        (2, b'\x03abc'),
        (5, b'1234'),
    ])
    def test_skip_field(self, wire_type, payload):
        stream = CodedInput.from_bytes(payload + b'\xff')
        assert skip_field(stream, 9, wire_type)
        assert stream.offset == len(payload)

    def test_skip_group(self):
        # field 4 group containing field 1 varint and a nested field 2 group
        data = b'\x23' + b'\x08\x05' + b'\x13\x10\x01\x14' + b'\x24'
        stream = CodedInput.from_bytes(data[1:])
        assert skip_field(stream, 4, 3)
        assert stream.at_end()

    def test_unterminated_group(self):
        stream = CodedInput.from_bytes(b'\x08\x05')
        with pytest.raises(TruncatedField):
            skip_field(stream, 4, 3)

    def test_group_closed_by_wrong_field(self):
        stream = CodedInput.from_bytes(b'\x08\x05\x2c')  # end-group of field 5
        with pytest.raises(DeltaCodecError):
            skip_field(stream, 4, 3)

    @pytest.mark.parametrize("wire_type", [4, 6, 7])
    def test_undelimited_wire_types(self, wire_type):
        stream = CodedInput.from_bytes(b'\x01\x02')
        assert not skip_field(stream, 9, wire_type)
        assert stream.offset == 0

    def test_nesting_up_to_limit_is_skipped(self):
        data = b'\x23' * (MAX_GROUP_DEPTH - 1) + b'\x24' * MAX_GROUP_DEPTH
        stream = CodedInput.from_bytes(data)
        assert skip_field(stream, 4, 3)
        assert stream.at_end()

    def test_nesting_past_limit_is_rejected(self):
        data = b'\x23' * MAX_GROUP_DEPTH + b'\x24' * (MAX_GROUP_DEPTH + 1)
        with pytest.raises(DeltaCodecError) as exc_info:
            skip_field(CodedInput.from_bytes(data), 4, 3)
        assert not isinstance(exc_info.value, TruncatedField)

    def test_deeply_nested_groups_fail_cleanly(self):
        with pytest.raises(DeltaCodecError):
            skip_field(CodedInput.from_bytes(b'\x23' * 2000), 4, 3)
        with pytest.raises(DeltaCodecError):
            DeltaBatch.from_bytes(encode_packed(1, [1], 64) + b'\x23' * 2000)

    def test_truncated_fixed64(self):
        stream = CodedInput.from_bytes(b'1234')
        with pytest.raises(TruncatedField) as exc_info:
            skip_field(stream, 9, 1)
        assert not isinstance(exc_info.value, TruncatedPacked)
        assert exc_info.value.expected == 8
