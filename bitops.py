class BitWriter:
    """Bit-packing writer.

    Accumulates bits MSB first into bytes and buffers them until flushed.

    :ivar buffer: Internal byte buffer holding fully written bytes.
    :type buffer: bytearray
    :ivar bit_buffer: 8-bit scratch register for accumulating pending bits.
    :type bit_buffer: int
    :ivar bit_count: Number of valid bits currently stored in ``bit_buffer`` (0-7).
    :type bit_count: int
    """

    def __init__(self):
        self.buffer = bytearray()
        self.bit_buffer = 0
        self.bit_count = 0

    def _push(self, bit: int):
        self.bit_buffer = (self.bit_buffer << 1) | bit
        self.bit_count += 1
        if self.bit_count == 8:
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0

    def write_code(self, code: str):
        """Write a code given as a string of ``'0'``/``'1'`` characters.

        :param code: Bit string, first character written first.
        :type code: str
        :returns: None
        :rtype: None
        :raises ValueError: If ``code`` holds anything but ``0`` and ``1``.
        """
        for char in code:
            if char == "0":
                self._push(0)
            elif char == "1":
                self._push(1)
            else:
                raise ValueError(f"Not a binary digit: {char!r}")

    def flush(self) -> bytes:
        """Flush remaining bits (if any) and return the full byte buffer.

        A partial last byte is padded with zeros.

        :returns: The accumulated bytes written so far.
        :rtype: bytes
        """
        if self.bit_count > 0:
            self.bit_buffer <<= (8 - self.bit_count)
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0
        return bytes(self.buffer)


class BitReader:
    """Bit-unpacking reader over a bytes-like object.

    :ivar data: Input data to read bits from.
    :type data: bytes
    :ivar pos: Index of the next source byte to load.
    :type pos: int
    :ivar bit_buffer: Scratch register holding the current source byte.
    :type bit_buffer: int
    :ivar bit_count: Number of unread bits remaining in ``bit_buffer`` (0-8).
    :type bit_count: int
    """

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0
        self.bit_buffer = 0
        self.bit_count = 0

    def read_bit(self) -> int:
        """Read a single bit.

        :raises EOFError: If the data is exhausted.
        """
        if self.bit_count == 0:
            if self.pos >= len(self.data):
                raise EOFError("Unexpected end of data")
            self.bit_buffer = self.data[self.pos]
            self.pos += 1
            self.bit_count = 8
        self.bit_count -= 1
        return (self.bit_buffer >> self.bit_count) & 1

    def read_code(self, nbits: int) -> str:
        """Read ``nbits`` bits as a string of ``'0'``/``'1'`` characters.

        :raises EOFError: If fewer than ``nbits`` bits remain.
        """
        return "".join("1" if self.read_bit() else "0" for _ in range(nbits))


def pack_bits(bits: str) -> bytes:
    """Pack a ``'0'``/``'1'`` string eight bits per byte, zero-padded."""
    writer = BitWriter()
    writer.write_code(bits)
    return writer.flush()


def unpack_bits(data: bytes, nbits: int) -> str:
    """Inverse of :func:`pack_bits` for the first ``nbits`` bits of ``data``.

    :raises EOFError: If ``data`` holds fewer than ``nbits`` bits.
    """
    return BitReader(data).read_code(nbits)
