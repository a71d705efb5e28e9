"""Encoding and decoding functions."""

import base64
import binascii

from exprdoc.errors import ExpressionError
from exprdoc.helpers import example, fails, function_doc, optional, param, returns
from exprdoc.registry import documented

CHARSETS = [
    ("standard", "[Standard](https://tools.ietf.org/html/rfc4648#section-4) Base64 format."),
    ("url_safe", "Modified Base64 for [URL variants](https://en.wikipedia.org/wiki/Base64#URL_applications)."),
]


def _altchars(charset: str) -> bytes | None:
    return b"-_" if charset == "url_safe" else None


@documented(
    function_doc(
        "encode_base64",
        summary="Encode a string to Base64.",
        category="codec",
        description="Encodes the `value` to [Base64](https://en.wikipedia.org/wiki/Base64).",
        parameters=[
            param("value", "string", "The string to encode."),
            optional("padding", "boolean", "Whether the Base64 output is [padded](https://en.wikipedia.org/wiki/Base64#Output_padding).", default=True),
            optional("charset", "string", "The character set to use when encoding the data.", default="standard", enum=CHARSETS),
        ],
        returns=returns("string", "The Base64 encoding of `value`."),
        examples=[
            example("Encode to Base64 (default)", 'encode_base64("please encode me")', "cGxlYXNlIGVuY29kZSBtZQ=="),
            example(
                "Encode to Base64 (without padding)",
                'encode_base64("please encode me", padding: false)',
                "cGxlYXNlIGVuY29kZSBtZQ",
            ),
            example("Encode to Base64 (URL safe)", 'encode_base64("?>>", charset: "url_safe")', "Pz4-"),
        ],
    )
)
def encode_base64(value: str, padding: bool = True, charset: str = "standard") -> str:
    encoded = base64.b64encode(value.encode("utf-8"), altchars=_altchars(charset)).decode("ascii")
    return encoded if padding else encoded.rstrip("=")


@documented(
    function_doc(
        "decode_base64",
        summary="Decode a Base64 string.",
        category="codec",
        description="""
            Decodes the `value` (a [Base64](https://en.wikipedia.org/wiki/Base64) string)
            into its original string. Padding is optional.
        """,
        parameters=[
            param("value", "string", "The [Base64](https://en.wikipedia.org/wiki/Base64) data to decode."),
            optional("charset", "string", "The character set to use when decoding the data.", default="standard", enum=CHARSETS),
        ],
        returns=returns("string", "The decoded string; invalid UTF-8 sequences are replaced."),
        failures=["`value` isn't a valid encoded Base64 string."],
        examples=[
            example(
                "Decode Base64 data (default)",
                'decode_base64!("eW91IGhhdmUgc3VjY2Vzc2Z1bGx5IGRlY29kZWQgbWU=")',
                "you have successfully decoded me",
            ),
            example("Decode Base64 data (URL safe)", 'decode_base64!("Pz4-", charset: "url_safe")', "?>>"),
            example("Decode unpadded data", 'decode_base64!("cGxlYXNlIGVuY29kZSBtZQ")', "please encode me"),
            example("Invalid Base64", 'decode_base64!("not base64!")', fails()),
        ],
    )
)
def decode_base64(value: str, charset: str = "standard") -> str:
    data = value + "=" * (-len(value) % 4)
    try:
        decoded = base64.b64decode(data, altchars=_altchars(charset), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ExpressionError(f"unable to decode value from base64: {e}") from e
    return decoded.decode("utf-8", errors="replace")
