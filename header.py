from dataclasses import dataclass
from typing import Dict, List, Tuple

from errors import MalformedDataError
from huffman import CodeTable

BINARY_DIGITS = frozenset("01")


@dataclass(frozen=True)
class HeaderFormat:
    """Reserved characters of the stored text layout.

    A stored message reads
    ``<symbol><symbol_code_separator><code><codeword_separator>...``
    followed by ``end_of_header`` and the payload. Symbol characters that
    collide with a reserved character are prefixed with ``escape``.

    :ivar codeword_separator: Terminates each ``symbol:code`` record.
    :type codeword_separator: str
    :ivar symbol_code_separator: Separates a symbol from its code.
    :type symbol_code_separator: str
    :ivar end_of_header: Marker between the header and the payload.
    :type end_of_header: str
    :ivar escape: Prefix that makes the next symbol character literal.
    :type escape: str
    """

    codeword_separator: str = ";"
    symbol_code_separator: str = ":"
    end_of_header: str = "~DnE~"
    escape: str = "\\"

    def __post_init__(self):
        singles = (
            self.codeword_separator, self.symbol_code_separator, self.escape
        )
        for value in singles:
            if not isinstance(value, str) or len(value) != 1:
                raise ValueError(
                    f"Separators must be single characters, got {value!r}"
                )
            if value in BINARY_DIGITS:
                raise ValueError(f"Reserved character cannot be {value!r}")
        if len(set(singles)) != len(singles):
            raise ValueError("Separators and escape must be distinct")
        if not isinstance(self.end_of_header, str) or not self.end_of_header:
            raise ValueError("End-of-header marker must be a non-empty string")
        if set(self.end_of_header) <= BINARY_DIGITS:
            raise ValueError(
                "End-of-header marker must hold a non-binary character"
            )
        if set(self.end_of_header) & set(singles):
            raise ValueError(
                "End-of-header marker cannot contain a separator or escape"
            )

    @property
    def reserved(self) -> frozenset:
        return frozenset(
            (self.codeword_separator, self.symbol_code_separator, self.escape)
        )


DEFAULT_FORMAT = HeaderFormat()


def escape_symbol(symbol: str, fmt: HeaderFormat = DEFAULT_FORMAT) -> str:
    """Render ``symbol`` so that it cannot be confused with header syntax.

    :param symbol: Non-empty symbol text.
    :type symbol: str
    :param fmt: Layout whose reserved characters are escaped.
    :type fmt: HeaderFormat
    :returns: Escaped symbol text.
    :rtype: str
    :raises TypeError: If ``symbol`` is not a string.
    :raises ValueError: If ``symbol`` is empty.
    """
    if not isinstance(symbol, str):
        raise TypeError(f"Header symbols must be strings, got {symbol!r}")
    if not symbol:
        raise ValueError("Header symbols cannot be empty")
    reserved = fmt.reserved
    out = []
    for i, char in enumerate(symbol):
        if char in reserved:
            out.append(fmt.escape)
        elif i == 0 and symbol.startswith(fmt.end_of_header):
            out.append(fmt.escape)
        out.append(char)
    return "".join(out)


def serialize_header(table: CodeTable,
                     fmt: HeaderFormat = DEFAULT_FORMAT) -> str:
    """Serialize a code table, end-of-header marker included.

    :param table: Code table to store.
    :type table: CodeTable
    :param fmt: Stored layout.
    :type fmt: HeaderFormat
    :returns: Header text ending with ``fmt.end_of_header``.
    :rtype: str
    """
    parts: List[str] = []
    for symbol, code in table:
        parts.append(escape_symbol(symbol, fmt))
        parts.append(fmt.symbol_code_separator)
        parts.append(code)
        parts.append(fmt.codeword_separator)
    parts.append(fmt.end_of_header)
    return "".join(parts)


def _scan_records(text: str, fmt: HeaderFormat,
                  terminated: bool) -> Tuple[Dict[str, str], int, int]:
    """Read ``symbol:code;`` records from the start of ``text``.

    When ``terminated`` is set, reading stops at the first record boundary
    where ``fmt.end_of_header`` begins; otherwise it stops at the end of
    ``text``.

    :returns: ``(codes, header_end, payload_start)`` where ``header_end``
        is the offset of the marker (or ``len(text)``) and
        ``payload_start`` the offset just past it.
    :rtype: Tuple[Dict[str, str], int, int]
    :raises MalformedDataError: If a record is malformed or, when
        ``terminated``, the marker never appears.
    """
    codes: Dict[str, str] = {}
    pos = 0
    end = len(text)
    marker = fmt.end_of_header

    while True:
        if terminated and text.startswith(marker, pos):
            return codes, pos, pos + len(marker)
        if pos >= end:
            if terminated:
                raise MalformedDataError("End-of-header marker not found")
            return codes, pos, pos

        chars = []
        while True:
            if pos >= end:
                raise MalformedDataError(
                    f"Record at offset {pos} has no symbol/code separator"
                )
            char = text[pos]
            if char == fmt.escape:
                if pos + 1 >= end:
                    raise MalformedDataError("Dangling escape in header")
                chars.append(text[pos + 1])
                pos += 2
            elif char == fmt.symbol_code_separator:
                pos += 1
                break
            else:
                chars.append(char)
                pos += 1
        symbol = "".join(chars)
        if not symbol:
            raise MalformedDataError(f"Empty symbol before offset {pos}")

        stop = text.find(fmt.codeword_separator, pos)
        if stop < 0:
            raise MalformedDataError(
                f"Unterminated code for symbol {symbol!r}"
            )
        code = text[pos:stop]
        if not code or not set(code) <= BINARY_DIGITS:
            raise MalformedDataError(
                f"Invalid code {code!r} for symbol {symbol!r}"
            )
        if symbol in codes:
            raise MalformedDataError(f"Duplicate symbol {symbol!r} in header")
        codes[symbol] = code
        pos = stop + 1


def _to_table(codes: Dict[str, str]) -> CodeTable:
    if not codes:
        raise MalformedDataError("Header holds no codewords")
    # adjacent in sorted order is enough: anything sorting between a code
    # and one of its extensions shares that code as a prefix
    ordered = sorted(codes.values())
    for shorter, longer in zip(ordered, ordered[1:]):
        if longer.startswith(shorter):
            raise MalformedDataError(
                f"Code {shorter!r} is a prefix of {longer!r}"
            )
    return CodeTable(codes)


def split_stored(text: str,
                 fmt: HeaderFormat = DEFAULT_FORMAT) -> Tuple[str, str]:
    """Split stored text into its header and payload.

    The header is read record by record, so a marker can only be found
    where a new record would start.

    :param text: Full stored message.
    :type text: str
    :param fmt: Stored layout.
    :type fmt: HeaderFormat
    :returns: ``(header, payload)`` without the marker.
    :rtype: Tuple[str, str]
    :raises MalformedDataError: If the marker is missing or repeated.
    """
    _, header_end, payload_start = _scan_records(text, fmt, terminated=True)
    payload = text[payload_start:]
    if fmt.end_of_header in payload:
        raise MalformedDataError("End-of-header marker appears more than once")
    return text[:header_end], payload


def parse_header(header: str, fmt: HeaderFormat = DEFAULT_FORMAT) -> CodeTable:
    """Rebuild a code table from header text (marker excluded).

    Each record's symbol runs up to the first unescaped
    ``symbol_code_separator``; the code runs up to the next
    ``codeword_separator``.

    :param header: Header text as returned by :func:`split_stored`.
    :type header: str
    :param fmt: Stored layout.
    :type fmt: HeaderFormat
    :returns: The stored code table.
    :rtype: CodeTable
    :raises MalformedDataError: If the header is empty, a record is
        malformed, or the codes are not a prefix-free set.
    """
    codes, _, _ = _scan_records(header, fmt, terminated=False)
    return _to_table(codes)


def read_header(text: str,
                fmt: HeaderFormat = DEFAULT_FORMAT) -> Tuple[CodeTable, str]:
    """Parse the header of a stored message and return it with the payload.

    :param text: Full stored message.
    :type text: str
    :param fmt: Stored layout.
    :type fmt: HeaderFormat
    :returns: ``(table, payload)``.
    :rtype: Tuple[CodeTable, str]
    :raises MalformedDataError: See :func:`split_stored` and
        :func:`parse_header`.
    """
    header, payload = split_stored(text, fmt)
    return parse_header(header, fmt), payload
