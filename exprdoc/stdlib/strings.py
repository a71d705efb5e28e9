"""String functions."""

import re

from exprdoc.helpers import example, function_doc, optional, param, returns
from exprdoc.registry import documented

# ===================================================================
# upcase / downcase / strip_whitespace
# ===================================================================


@documented(
    function_doc(
        "upcase",
        summary="Upcase a string.",
        category="string",
        description="Upcases `value`, where upcase is defined according to the Unicode Derived Core Property Uppercase.",
        parameters=[param("value", "string", "The string to convert to uppercase.")],
        returns=returns("string", "`value` with every character uppercased."),
        examples=[
            example("Upcase a string", 'upcase("abc")', "ABC"),
            example("Mixed case with punctuation", 'upcase("Hello, World!")', "HELLO, WORLD!"),
        ],
    )
)
def upcase(value: str) -> str:
    return value.upper()


@documented(
    function_doc(
        "downcase",
        summary="Downcase a string.",
        category="string",
        description="Downcases `value`, where downcase is defined according to the Unicode Derived Core Property Lowercase.",
        parameters=[param("value", "string", "The string to convert to lowercase.")],
        returns=returns("string", "`value` with every character lowercased."),
        examples=[
            example("Downcase a string", 'downcase("Hello, World!")', "hello, world!"),
        ],
    )
)
def downcase(value: str) -> str:
    return value.lower()


@documented(
    function_doc(
        "strip_whitespace",
        summary="Strip leading and trailing whitespace.",
        category="string",
        description="""
            Strips whitespace from the start and end of `value`, where whitespace is
            defined by the Unicode `White_Space` property.
        """,
        parameters=[param("value", "string", "The string to trim.")],
        returns=returns("string", "`value` without surrounding whitespace."),
        examples=[
            example("Strip whitespace", 'strip_whitespace("  A sentence.  ")', "A sentence."),
            example(
                "Tabs and newlines",
                r'strip_whitespace("\t\tline\n")',
                "line",
            ),
        ],
    )
)
def strip_whitespace(value: str) -> str:
    return value.strip()


# ===================================================================
# snakecase
#
# Words are split on separators ("_", "-", space, ".") and then on case
# boundaries inside each run of letters and digits. original_case
# narrows splitting to what that case uses.
# ===================================================================

ORIGINAL_CASES = [
    ("camelCase", "[camelCase](https://en.wikipedia.org/wiki/Camel_case)"),
    ("PascalCase", "[PascalCase](https://en.wikipedia.org/wiki/Camel_case)"),
    ("SCREAMING_SNAKE", "[SCREAMING_SNAKE](https://en.wikipedia.org/wiki/Snake_case)"),
    ("snake_case", "[snake_case](https://en.wikipedia.org/wiki/Snake_case)"),
    ("kebab-case", "[kebab-case](https://en.wikipedia.org/wiki/Letter_case#Kebab_case)"),
]

BOUNDARIES = [
    ("lower_upper", "Lowercase to uppercase transitions (e.g., 'camelCase' → 'camel' + 'case')"),
    ("upper_lower", "Uppercase to lowercase transitions (e.g., 'CamelCase' → 'Camel' + 'Case')"),
    ("acronym", "Acronyms from words (e.g., 'XMLHttpRequest' → 'xmlhttp' + 'request')"),
    ("lower_digit", "Lowercase to digit transitions (e.g., 'foo2bar' → 'foo2_bar')"),
    ("upper_digit", "Uppercase to digit transitions (e.g., 'versionV2' → 'version_v2')"),
    ("digit_lower", "Digit to lowercase transitions (e.g., 'Foo123barBaz' → 'foo' + '123bar' + 'baz')"),
    ("digit_upper", "Digit to uppercase transitions (e.g., 'Version123Test' → 'version' + '123test')"),
]

# upper_lower is opt-in: it would split every capitalized word.
_DEFAULT_BOUNDARIES = frozenset(b for b, _ in BOUNDARIES) - {"upper_lower"}

_SEPARATORS = {
    None: r"[_\-\s.]+",
    "snake_case": r"_+",
    "SCREAMING_SNAKE": r"_+",
    "kebab-case": r"-+",
    "camelCase": None,
    "PascalCase": None,
}


def _is_boundary(name: str, prev: str, cur: str, nxt: str) -> bool:
    match name:
        case "lower_upper":
            return prev.islower() and cur.isupper()
        case "upper_lower":
            return prev.isupper() and cur.islower()
        case "acronym":
            return prev.isupper() and cur.isupper() and nxt.islower()
        case "lower_digit":
            return prev.islower() and cur.isdigit()
        case "upper_digit":
            return prev.isupper() and cur.isdigit()
        case "digit_lower":
            return prev.isdigit() and cur.islower()
        case "digit_upper":
            return prev.isdigit() and cur.isupper()
    return False


def _split_case(chunk: str, boundaries: frozenset[str]) -> list[str]:
    words: list[str] = []
    start = 0
    for i in range(1, len(chunk)):
        nxt = chunk[i + 1] if i + 1 < len(chunk) else ""
        if any(_is_boundary(b, chunk[i - 1], chunk[i], nxt) for b in boundaries):
            words.append(chunk[start:i])
            start = i
    words.append(chunk[start:])
    return words


def split_words(value: str, original_case: str | None = None, excluded: list[str] | None = None) -> list[str]:
    separator = _SEPARATORS[original_case]
    chunks = re.split(separator, value) if separator else [value]
    if original_case in ("snake_case", "SCREAMING_SNAKE", "kebab-case"):
        return [c for c in chunks if c]
    boundaries = _DEFAULT_BOUNDARIES - set(excluded or ())
    return [w for c in chunks if c for w in _split_case(c, boundaries) if w]


@documented(
    function_doc(
        "snakecase",
        summary="Convert a string to snake_case.",
        category="string",
        description="""
            Takes the `value` string, and turns it into snake_case. Optionally, you can
            pass in the existing case of the function, or else we will try to figure out
            the case automatically.
        """,
        parameters=[
            param("value", "string", "The string to convert to snake_case."),
            optional(
                "original_case",
                "string",
                "Optional hint on the original case type.",
                enum=ORIGINAL_CASES,
            ),
            optional(
                "excluded_boundaries",
                "array<string>",
                "Case boundaries to exclude during conversion.",
                enum=BOUNDARIES,
            ),
        ],
        returns=returns("string", "`value` in snake_case."),
        examples=[
            example("snake_case a string", 'snakecase("input-string")', "input_string"),
            example(
                "snake_case a string with original case",
                'snakecase("input-string", original_case: "kebab-case")',
                "input_string",
            ),
            example(
                "snake_case with excluded boundaries",
                'snakecase("s3BucketDetails", excluded_boundaries: ["lower_digit"])',
                "s3_bucket_details",
            ),
            example("snake_case an acronym", 'snakecase("XMLHttpRequest")', "xml_http_request"),
        ],
    )
)
def snakecase(
    value: str, original_case: str | None = None, excluded_boundaries: list[str] | None = None
) -> str:
    return "_".join(w.lower() for w in split_words(value, original_case, excluded_boundaries))
