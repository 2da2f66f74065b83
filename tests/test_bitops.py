import pytest

from bitops import BitWriter, BitReader, pack_bits, unpack_bits


def test_bitwriter_write_code_and_flush_basic():
    bw = BitWriter()
    bw.write_code("1010")
    bw.write_code("11110000")
    out = bw.flush()
    assert isinstance(out, (bytes, bytearray))
    assert len(out) == 2
    assert out[0] == 0b10101111
    assert out[1] == 0b00000000


def test_bitwriter_write_code_across_byte_boundary():
    bw = BitWriter()
    bw.write_code("101")
    bw.write_code("11111")
    bw.write_code("1")
    assert bw.flush() == bytes([0b10111111, 0b10000000])


def test_bitwriter_write_code_rejects_non_binary():
    bw = BitWriter()
    with pytest.raises(ValueError):
        bw.write_code("012")


def test_bitreader_read_bit_and_code():
    data = bytes([0b11001010, 0xFF])
    br = BitReader(data)
    assert br.read_code(3) == "110"
    assert br.read_code(5) == "01010"
    assert br.read_bit() == 1
    assert br.pos == 2


def test_bitreader_eoferror_on_insufficient_bits():
    br = BitReader(b"\xF0")
    with pytest.raises(EOFError):
        _ = br.read_code(9)


def test_pack_bits_pads_last_byte():
    assert pack_bits("1") == b"\x80"
    assert pack_bits("") == b""
    assert pack_bits("000000001") == b"\x00\x80"


def test_unpack_bits_ignores_padding():
    bits = "1011001110"
    assert unpack_bits(pack_bits(bits), len(bits)) == bits


def test_unpack_bits_truncated_raises():
    with pytest.raises(EOFError):
        unpack_bits(b"\xAA", 9)
