import struct
from typing import Callable, Hashable, List, Optional, Sequence

from bitops import pack_bits, unpack_bits
from errors import EmptyInputError, MalformedDataError
from header import (
    DEFAULT_FORMAT,
    HeaderFormat,
    parse_header,
    read_header,
    serialize_header,
)
from huffman import CodeTable, HuffmanTree, count_frequencies

ProgressCallback = Callable[[int, int], None]


class HuffmanCodec:
    """Static Huffman encoder/decoder for symbol streams.

    The text form stores the serialized code table, the end-of-header
    marker, and the payload as ``'0'``/``'1'`` characters. The packed form
    stores the same header followed by the payload bits eight per byte.

    :ivar fmt: Reserved characters of the stored layout.
    :type fmt: HeaderFormat
    """

    #: Packed layout length fields: header byte length, payload bit count.
    PACKED_LENGTH = struct.Struct(">I")

    def __init__(self, fmt: HeaderFormat = DEFAULT_FORMAT):
        self.fmt = fmt

    def build_table(self, symbols: Sequence[Hashable]) -> CodeTable:
        """Build the code table for ``symbols``.

        :param symbols: Non-empty symbol sequence.
        :type symbols: Sequence[Hashable]
        :returns: Code table derived from the symbol counts.
        :rtype: CodeTable
        :raises EmptyInputError: If ``symbols`` is empty.
        """
        frequencies = count_frequencies(symbols)
        if not frequencies:
            raise EmptyInputError("Input is empty, there is nothing to encode")
        return HuffmanTree.build(frequencies).code_table()

    def encode(
        self,
        symbols: Sequence[str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Encode ``symbols`` into the text stored format.

        :param symbols: Symbols to encode, e.g. a ``str``.
        :type symbols: Sequence[str]
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting input symbols consumed.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Header, end-of-header marker and payload bits.
        :rtype: str
        :raises EmptyInputError: If ``symbols`` is empty.
        """
        table = self.build_table(symbols)
        return serialize_header(table, self.fmt) + self._encode_payload(
            symbols, table, on_progress
        )

    def encode_packed(
        self,
        symbols: Sequence[str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> bytes:
        """Encode ``symbols`` into the packed stored format.

        Layout (big-endian):
        - Header length in bytes: uint32
        - Header and end-of-header marker (utf-8)
        - Payload length in bits: uint32
        - Payload bits, MSB first, zero-padded to a byte boundary

        :param symbols: Symbols to encode.
        :type symbols: Sequence[str]
        :param on_progress: Optional callback ``on_progress(done, total)``.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Packed message.
        :rtype: bytes
        :raises EmptyInputError: If ``symbols`` is empty.
        """
        table = self.build_table(symbols)
        header = serialize_header(table, self.fmt).encode("utf-8")
        bits = self._encode_payload(symbols, table, on_progress)
        return b"".join((
            self.PACKED_LENGTH.pack(len(header)),
            header,
            self.PACKED_LENGTH.pack(len(bits)),
            pack_bits(bits),
        ))

    def decode(
        self,
        stored: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Decode a text stored message back into a string.

        :param stored: Output of :meth:`encode`.
        :type stored: str
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting payload bits consumed.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: The original text.
        :rtype: str
        :raises MalformedDataError: If the marker is missing or repeated,
            the header is invalid, or the payload is corrupt or truncated.
        """
        return "".join(self.decode_symbols(stored, on_progress))

    def decode_symbols(
        self,
        stored: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[str]:
        """Like :meth:`decode` but return the list of decoded symbols."""
        table, payload = read_header(stored, self.fmt)
        return self._decode_payload(payload, table, on_progress)

    def decode_packed(
        self,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Decode a packed message produced by :meth:`encode_packed`.

        :param data: Packed message.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: The original text.
        :rtype: str
        :raises MalformedDataError: If the data is truncated or corrupt.
        """
        size = self.PACKED_LENGTH.size
        try:
            (header_len,) = self.PACKED_LENGTH.unpack_from(data, 0)
            header_end = size + header_len
            if header_end > len(data):
                raise MalformedDataError("Packed header is truncated")
            (nbits,) = self.PACKED_LENGTH.unpack_from(data, header_end)
        except struct.error as e:
            raise MalformedDataError(f"Packed data is truncated: {e}") from e

        try:
            header = data[size:header_end].decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDataError(f"Packed header is not utf-8: {e}") from e
        marker = self.fmt.end_of_header
        if not header.endswith(marker):
            raise MalformedDataError("End-of-header marker not found")
        table = parse_header(header[:-len(marker)], self.fmt)

        try:
            bits = unpack_bits(data[header_end + size:], nbits)
        except EOFError as e:
            raise MalformedDataError("Packed payload is truncated") from e
        return "".join(self._decode_payload(bits, table, on_progress))

    @staticmethod
    def _encode_payload(
        symbols: Sequence[str],
        table: CodeTable,
        on_progress: Optional[ProgressCallback],
    ) -> str:
        total = len(symbols)
        if on_progress is None:
            return "".join(table.code_for(symbol) for symbol in symbols)
        parts = []
        for done, symbol in enumerate(symbols, 1):
            parts.append(table.code_for(symbol))
            on_progress(done, total)
        return "".join(parts)

    @staticmethod
    def _decode_payload(
        payload: str,
        table: CodeTable,
        on_progress: Optional[ProgressCallback],
    ) -> List[str]:
        """Match accumulated payload bits against the known codes.

        :param payload: Payload bits as ``'0'``/``'1'`` characters.
        :type payload: str
        :param table: Code table to decode with.
        :type table: CodeTable
        :param on_progress: Optional callback ``on_progress(done, total)``.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Decoded symbols in order.
        :rtype: List[str]
        :raises MalformedDataError: On a non-binary character, or when the
            payload ends in the middle of a code.
        """
        lookup = table.symbols
        longest = max(len(code) for code in lookup)
        total = len(payload)
        out: List[str] = []
        buffer = ""
        for done, bit in enumerate(payload, 1):
            if bit != "0" and bit != "1":
                raise MalformedDataError(
                    f"Invalid payload character {bit!r} at bit {done - 1}"
                )
            buffer += bit
            symbol = lookup.get(buffer)
            if symbol is not None:
                out.append(symbol)
                buffer = ""
                if on_progress is not None:
                    on_progress(done, total)
            elif len(buffer) >= longest:
                raise MalformedDataError(
                    f"Bits ending at bit {done - 1} match no code"
                )
        if buffer:
            raise MalformedDataError(
                f"Payload ends with {len(buffer)} bit(s) that match no code"
            )
        if on_progress is not None:
            on_progress(total, total)
        return out
