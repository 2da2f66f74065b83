class HuffmanError(ValueError):
    """Base class for codec failures on a single encode/decode call."""


class EmptyInputError(HuffmanError):
    """Raised when asked to encode a sequence with no symbols."""


class MalformedDataError(HuffmanError):
    """Raised when stored data cannot be decoded.

    Covers a missing or duplicated end-of-header marker, an unparsable
    header, and payload bits that do not end on a complete code.
    """
