import html
import re

_ESCAPE_PATTERN = re.compile(r"\\(.?)")


def _resolve_escape(match: re.Match[str]) -> str:
    escaped = match.group(1)
    if escaped == "\\":
        return "\\"
    if escaped == "0":
        return "\0"
    # An empty group is a trailing lone backslash, which is dropped.
    return escaped


def strip_slashes(text: str) -> str:
    """Resolve backslash escape sequences to their literal characters.

    ``\\\\`` becomes one backslash, ``\\0`` becomes NUL, a trailing lone
    backslash is dropped and any other ``\\X`` becomes ``X``.

    Args:
        text: Raw user input.

    Returns:
        str: Text with escape sequences resolved.
    """
    return _ESCAPE_PATTERN.sub(_resolve_escape, text)


def encode_markup(text: str) -> str:
    """Encode characters that are significant in HTML (& < > " ')."""
    return html.escape(text, quote=True)


def sanitize(text: str) -> str:
    """Unescape then encode free text so stored content cannot inject markup.

    Args:
        text: Raw user input.

    Returns:
        str: Text safe to render inside an HTML document.
    """
    return encode_markup(strip_slashes(text))
