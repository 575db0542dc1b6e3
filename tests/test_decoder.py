import logging
from io import BytesIO

import pytest
from stb_builder import pack_records

from STBLib.Exceptions import (
    InvalidOffsetException,
    MalformedTypeDescriptorException,
    StackUnderflowException,
    StringScanLimitException,
    UnexpectedEndOfStreamException,
    UnexpectedValueTypeException,
    UnsupportedOpcodeException,
)
from STBLib.IO import ExtendedBinaryReader
from STBLib.Misc import STBSettings
from STBLib.Scripting import STBDecoder, StackValue, decode_stream, float_to_int_bits, get_lines

END = (0x0, 0x0, 0x0)
DESCRIPTOR = [(0x3, 0x1, 0x40), (0x3, 0x1, 0x1), (0x6, 0x0, 0x0)]


def make_decoder(*records, settings=None) -> STBDecoder:
    return STBDecoder(ExtendedBinaryReader(BytesIO(pack_records(*records))), settings)


def decode(*records):
    return list(make_decoder(*records).iter_lines())


def test_time_line() -> None:
    assert decode((0x3, 0x1, 30), (0x13, 0x0, 0x0), (0x4, 0x0, 0x0), END) == ["time = 30;"]


def test_macro_line_uses_upper_case_hex() -> None:
    assert decode((0x13, 0x0, 0xAB), (0x4, 0x0, 0x0), END) == ["macro(0x00AB);"]
    assert decode((0x13, 0x0, 0xBEEF), (0x4, 0x0, 0x0), END) == ["macro(0xBEEF);"]


def test_exit_line() -> None:
    assert decode((0x3, 0x1, -1), (0xF, 0x0, 0x0), END) == ["exit(-1);"]


def test_decoding_stops_at_sentinel() -> None:
    records = [(0x3, 0x1, 2), (0xF, 0x0, 0x0), END, (0x7, 0x0, 0x0)]
    assert decode(*records) == ["exit(2);"]


def test_sub_line_restores_push_order() -> None:
    records = DESCRIPTOR + [
        (0x3, 0x1, 7),
        (0x3, 0x2, float_to_int_bits(-0.25)),
        (0x3, 0x1, 0),
        (0x15, 0x4, 0x0),
        END,
    ]
    assert decode(*records) == ["sub001(7, -0.2500, 0);"]


def test_sub_line_without_arguments() -> None:
    assert decode(*DESCRIPTOR, (0x15, 0x1, 0x0), END) == ["sub001();"]


def test_null_marks_previous_value() -> None:
    records = DESCRIPTOR + [
        (0x3, 0x2, float_to_int_bits(1.5)),
        (0xB, 0x0, 0x0),
        (0x3, 0x1, 3),
        (0xB, 0x0, 0x0),
        (0x3, 0x1, 4),
        (0x15, 0x4, 0x0),
        END,
    ]
    assert decode(*records) == ["sub001(1.5000f, 3f, 4);"]


def test_sub_type_is_zero_padded() -> None:
    records = [(0x3, 0x1, 0x40), (0x3, 0x1, 42), (0x6, 0x0, 0x0), (0x15, 0x1, 0x0), END]
    assert decode(*records) == ["sub042();"]


def test_string_operand_is_read_from_pool() -> None:
    code = pack_records(*DESCRIPTOR, (0x3, 0x3, 0), (0x15, 0x2, 0x0), END)
    pool_position = len(code)
    code = pack_records(*DESCRIPTOR, (0x3, 0x3, pool_position - 0x58), (0x15, 0x2, 0x0), END)
    data = code + "テスト".encode("cp932") + b"\x00"

    decoder = STBDecoder(ExtendedBinaryReader(BytesIO(data)))
    assert list(decoder.iter_lines()) == ['sub001("テスト");']


def test_get_lines_starts_after_sub_header() -> None:
    script_start = 0x20
    data = bytearray(script_start + 0x38)
    data[4:8] = script_start.to_bytes(4, "little")
    data += pack_records((0x3, 0x1, 30), (0x13, 0x0, 0x0), (0x4, 0x0, 0x0), END)
    assert list(get_lines(BytesIO(bytes(data)))) == ["time = 30;"]


@pytest.mark.parametrize(
    "records",
    [
        [(0x7, 0x0, 0x0), END],
        [(0x3, 0x4, 0x0), END],
        [(0x16, 0x0, 0x0), END],
    ],
)
def test_unsupported_opcode(records) -> None:
    with pytest.raises(UnsupportedOpcodeException) as exc_info:
        decode(*records)
    assert exc_info.value.op_code == records[0][0]
    assert exc_info.value.position == 0


def test_unsupported_opcode_reports_position() -> None:
    with pytest.raises(UnsupportedOpcodeException) as exc_info:
        decode((0x6, 0x0, 0x0), (0x8, 0x0, 0x0), END)
    assert exc_info.value.position == 0xC


def test_call_on_empty_stack_is_structural_error() -> None:
    with pytest.raises(StackUnderflowException):
        decode((0x4, 0x0, 0x0), END)


def test_time_requires_int_value() -> None:
    with pytest.raises(UnexpectedValueTypeException):
        decode((0x6, 0x0, 0x0), (0x13, 0x0, 0x0), (0x4, 0x0, 0x0), END)


@pytest.mark.parametrize(
    "descriptor",
    [
        [(0x3, 0x1, 0x41), (0x3, 0x1, 0x1), (0x6, 0x0, 0x0)],
        [(0x3, 0x1, 0x40), (0x3, 0x1, 0x1), (0x3, 0x1, 0x1)],
        [(0x3, 0x1, 0x40), (0x3, 0x2, 0x1), (0x6, 0x0, 0x0)],
    ],
)
def test_malformed_type_descriptor(descriptor) -> None:
    with pytest.raises(MalformedTypeDescriptorException):
        decode(*descriptor, (0x15, 0x1, 0x0), END)


def test_stringify_rejects_other_tags() -> None:
    with pytest.raises(UnexpectedValueTypeException):
        decode(*DESCRIPTOR, (0x6, 0x0, 0x0), (0x15, 0x2, 0x0), END)
    with pytest.raises(UnexpectedValueTypeException):
        STBDecoder.stringify(StackValue.uint16(1))


def test_missing_sentinel_is_reported() -> None:
    with pytest.raises(UnexpectedEndOfStreamException):
        decode((0x3, 0x1, 1))


def test_decode_returns_result_instead_of_raising() -> None:
    result = make_decoder((0x3, 0x1, 30), (0x13, 0x0, 0x0), (0x4, 0x0, 0x0), (0x7, 0x0, 0x0), END).decode()
    assert not result.ok
    assert isinstance(result.error, UnsupportedOpcodeException)
    assert result.lines == ["time = 30;"]


def test_balanced_script_leaves_empty_stack() -> None:
    decoder = make_decoder((0x3, 0x1, 30), (0x13, 0x0, 0x0), (0x4, 0x0, 0x0), END)
    result = decoder.decode()
    assert result.ok
    assert result.leftover == []
    assert len(decoder.stack) == 0


def test_leftover_values_are_warned_about(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="STBLib.Scripting.stb_decoder"):
        result = make_decoder((0x3, 0x1, 5), END).decode()
    assert result.ok
    assert result.leftover == [StackValue.int32(5)]
    assert "left on the stack" in caplog.text


def test_unterminated_string_fails_decode() -> None:
    data = pack_records(*DESCRIPTOR, (0x3, 0x3, 0x48 - 0x58), (0x15, 0x2, 0x0), END) + b"abcdefgh"
    decoder = STBDecoder(ExtendedBinaryReader(BytesIO(data)), STBSettings(string_scan_limit=4))
    result = decoder.decode()
    assert isinstance(result.error, StringScanLimitException)


def test_string_operand_before_stream_start_fails_decode() -> None:
    result = make_decoder(*DESCRIPTOR, (0x3, 0x3, -0x100), (0x15, 0x2, 0x0), END).decode()
    assert not result.ok
    assert isinstance(result.error, InvalidOffsetException)
    assert result.error.position == -0x100 + 0x58


def test_negative_script_start_fails_decode_stream() -> None:
    data = b"\x00" * 4 + (-0x100).to_bytes(4, "little", signed=True) + b"\x00" * 0x40
    result = decode_stream(BytesIO(data))
    assert not result.ok
    assert isinstance(result.error, InvalidOffsetException)


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_float_has_no_text_form(value) -> None:
    records = DESCRIPTOR + [(0x3, 0x2, float_to_int_bits(value)), (0x15, 0x2, 0x0), END]
    result = make_decoder(*records).decode()
    assert isinstance(result.error, UnexpectedValueTypeException)
    with pytest.raises(UnexpectedValueTypeException):
        STBDecoder.stringify(StackValue.float32(value))
