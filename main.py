import argparse
import sys

from codec import HuffmanCodec
from errors import EmptyInputError, MalformedDataError

USAGE = "--input <path> --process <encode|decode> --output <path>"


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="huffcodec",
        usage="%(prog)s " + USAGE + " [--packed] [-P]",
        description="Static Huffman encoder/decoder for text files",
    )
    parser.add_argument(
        "--input", required=True, help="File to encode or decode"
    )
    parser.add_argument(
        "--process",
        required=True,
        type=str.lower,
        choices=["encode", "decode"],
        help="Whether to encode or decode the input file",
    )
    parser.add_argument(
        "--output", required=True, help="Destination file path"
    )
    parser.add_argument(
        "--packed",
        action="store_true",
        help="Store the payload as packed bits instead of 0/1 characters",
    )
    parser.add_argument(
        "-P",
        "--no-progress",
        action="store_true",
        help="Hide the progress line",
    )
    return parser


def _print_progress(line: str) -> None:
    """Render and flush a single progress line in-place (carriage return).

    :param line: The textual progress line to display.
    :type line: str
    :returns: None
    :rtype: None
    """
    sys.stdout.write("\r" + line)
    sys.stdout.flush()


def _fmt_pct(done: int, total: int) -> str:
    """Format a completion percentage string like ``12.34%``.

    :param done: Units completed.
    :type done: int
    :param total: Total units to complete.
    :type total: int
    :returns: Percentage.
    :rtype: str
    """
    if total <= 0:
        return f"{0:6.2f}%"
    pct = 100.0 * (done / float(total))
    return f"{pct:6.2f}%"


def _fmt_bytes(n: float) -> str:
    """Format a byte count into a human-readable string.

    :param n: Number of bytes.
    :type n: float
    :returns: Human-readable string.
    :rtype: str
    """
    for unit in ['', 'Ki', 'Mi', 'Gi', 'Ti']:
        if abs(n) < 1024:
            return f"{n:.2f} {unit}B"
        n /= 1024
    return f"{n:.2f} PiB"


class Progress:
    """Callable progress reporter, redraws only when the percent changes.

    :ivar label: Action label (e.g. "Encoding" or "Decoding").
    :type label: str
    :ivar path: Path of the file being processed.
    :type path: str
    """

    def __init__(self, label: str, path: str) -> None:
        self.label = label
        self.path = path
        self._last_reported = -1

    def __call__(self, done: int, total: int) -> None:
        """Update the progress display.

        :param done: Units processed so far.
        :type done: int
        :param total: Total units.
        :type total: int
        :returns: None
        :rtype: None
        """
        if total <= 0:
            return
        percent_bucket = int((done * 100) / total)
        if percent_bucket == self._last_reported:
            return
        self._last_reported = percent_bucket
        _print_progress(f"{self.label} {self.path}  {_fmt_pct(done, total)}")


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def encode_file(input_path: str, output_path: str, packed: bool = False,
                hide_progress: bool = False) -> bool:
    """Encode the text file at ``input_path`` into ``output_path``.

    Nothing is written when the input is missing or empty.

    :param input_path: Text file to encode.
    :type input_path: str
    :param output_path: Destination for the encoded message.
    :type output_path: str
    :param packed: Write the packed layout instead of the text layout.
    :type packed: bool
    :param hide_progress: Whether to hide the progress line.
    :type hide_progress: bool
    :returns: ``True`` if the output was written.
    :rtype: bool
    """
    try:
        text = _read_text(input_path)
    except FileNotFoundError:
        print(f"[!] Input file not found: {input_path}")
        return False
    except UnicodeDecodeError:
        print(f"[!] {input_path} is not a utf-8 text file")
        return False

    codec = HuffmanCodec()
    on_prog = None if hide_progress else Progress("Encoding", input_path)
    try:
        if packed:
            encoded = codec.encode_packed(text, on_progress=on_prog)
        else:
            encoded = codec.encode(text, on_progress=on_prog)
    except EmptyInputError:
        print("[!] Input file was empty. There's nothing to encode.")
        return False
    if not hide_progress:
        sys.stdout.write("\n")
        sys.stdout.flush()

    if packed:
        with open(output_path, "wb") as out:
            out.write(encoded)
        size_after = len(encoded)
    else:
        with open(output_path, "w", encoding="utf-8", newline="") as out:
            out.write(encoded)
        size_after = len(encoded.encode("utf-8"))

    size_before = len(text.encode("utf-8"))
    print("Size before compression: ", _fmt_bytes(size_before))
    print("Size after compression: ", _fmt_bytes(size_after))
    print(f"Compression ratio: {size_before / size_after:.2f}")
    return True


def decode_file(input_path: str, output_path: str, packed: bool = False,
                hide_progress: bool = False) -> bool:
    """Decode the message at ``input_path`` into the text file ``output_path``.

    :param input_path: Encoded message produced by :func:`encode_file`.
    :type input_path: str
    :param output_path: Destination for the decoded text.
    :type output_path: str
    :param packed: Read the packed layout instead of the text layout.
    :type packed: bool
    :param hide_progress: Whether to hide the progress line.
    :type hide_progress: bool
    :returns: ``True`` if the output was written.
    :rtype: bool
    """
    try:
        if packed:
            with open(input_path, "rb") as f:
                stored = f.read()
        else:
            stored = _read_text(input_path)
    except FileNotFoundError:
        print(f"[!] Input file not found: {input_path}")
        return False
    except UnicodeDecodeError:
        print(f"[!] {input_path} is not a text-encoded message, "
              "try --packed")
        return False

    if not stored:
        print("[!] Input file was empty. There's nothing to decode.")
        return False

    codec = HuffmanCodec()
    on_prog = None if hide_progress else Progress("Decoding", input_path)
    try:
        if packed:
            text = codec.decode_packed(stored, on_progress=on_prog)
        else:
            text = codec.decode(stored, on_progress=on_prog)
    except MalformedDataError as e:
        if not hide_progress:
            sys.stdout.write("\n")
        print(f"[!] Cannot decode {input_path}: {e}")
        return False
    if not hide_progress:
        sys.stdout.write("\n")
        sys.stdout.flush()

    with open(output_path, "w", encoding="utf-8", newline="") as out:
        out.write(text)
    return True


def main(argv=None):
    """Entry point for the CLI tool.

    :param argv: Arguments to parse instead of ``sys.argv[1:]``.
    :type argv: List[str] | None
    :returns: Process exit status.
    :rtype: int
    """
    parser = get_parser()
    args = parser.parse_args(argv)

    if args.process == "encode":
        ok = encode_file(
            args.input, args.output, args.packed, args.no_progress
        )
    else:
        ok = decode_file(
            args.input, args.output, args.packed, args.no_progress
        )
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
