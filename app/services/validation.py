"""Request payload decoding and per-endpoint validation.

Values arrive as strings (form bodies and query strings). A missing field, a
field sent more than once, or a value failing a business rule raises
``ValidationAppError`` with a message naming the field or rule; nothing here
touches storage or rate limiter state.
"""

from __future__ import annotations

import re
from typing import Mapping, Union
from urllib.parse import parse_qs

from app.core.config import settings
from app.core.errors import ValidationAppError
from app.schemas.requests import ArticleSubmission, CommentSubmission
from app.utils.sanitizer import sanitize

FormValue = Union[str, list[str]]
FormData = Mapping[str, FormValue]

# Optional whitespace and sign, then hex (0x...) or decimal digits; the rest is ignored
_INT_PREFIX = re.compile(r"\s*(?P<sign>[+-]?)(?:0[xX](?P<hex>[0-9a-fA-F]*)|(?P<dec>[0-9]+))")
_MAX_ID = 2**31 - 1
_MAX_FORM_FIELDS = 64


def _fail(code: str, message: str, field: str | None = None) -> ValidationAppError:
    return ValidationAppError(code=code, message=message, details={"field": field} if field else None)


def decode_form(body: bytes) -> dict[str, FormValue]:
    """Decode an ``application/x-www-form-urlencoded`` body.

    A key sent once maps to a string; a key sent several times maps to the
    list of its values, which every validator treats as the wrong type.

    Raises:
        ValidationAppError: If the body is not valid UTF-8 or has too many fields.
    """
    try:
        text = body.decode("utf-8")
        parsed = parse_qs(
            text,
            keep_blank_values=True,
            encoding="utf-8",
            errors="strict",
            max_num_fields=_MAX_FORM_FIELDS,
        )
    except (UnicodeDecodeError, ValueError) as exc:
        raise _fail("unparsable_body", "Cannot parse the requested body.") from exc

    return {key: values[0] if len(values) == 1 else values for key, values in parsed.items()}


def parse_int(value: object) -> int | None:
    """Parse a leading integer out of a string; None if there is none.

    Surrounding whitespace and trailing characters are tolerated ("  42abc"
    is 42). A ``0x`` prefix selects hexadecimal ("0x10" is 16, "0x" alone is
    invalid). Values outside the 32-bit id range are rejected.
    """
    if not isinstance(value, str):
        return None
    match = _INT_PREFIX.match(value)
    if match is None:
        return None
    sign, hex_digits, digits = match.group("sign", "hex", "dec")
    if hex_digits is not None:
        if not hex_digits or len(hex_digits.lstrip("0")) > 8:
            return None
        number = int(hex_digits, 16)
    else:
        if len(digits.lstrip("0")) > 10:
            return None
        number = int(digits)
    if sign == "-":
        number = -number
    if abs(number) > _MAX_ID:
        return None
    return number


def _article_id(data: FormData) -> int:
    raw = data.get("articleId", data.get("articleid"))
    article_id = parse_int(raw)
    if article_id is None:
        raise _fail("invalid_article_id", "Invalid articleId type. Expected a number.", "articleId")
    return article_id


def validate_comment_submission(data: FormData, *, max_chars: int | None = None) -> CommentSubmission:
    """Validate an /addcomment form.

    Content is trimmed, checked for emptiness, then sanitized; the length limit
    applies to the sanitized text because entity encoding expands it.

    Args:
        data: Decoded form fields.
        max_chars: Maximum sanitized length (defaults to settings).

    Returns:
        CommentSubmission: Token, parsed article id and sanitized content.

    Raises:
        ValidationAppError: On the first failing check.
    """
    limit = max_chars if max_chars is not None else settings.app.max_comment_chars

    token = data.get("token")
    if not isinstance(token, str):
        raise _fail("invalid_token_type", "Invalid token type. Expected a string.", "token")
    if not token:
        raise _fail("empty_token", "Token is empty.", "token")

    article_id = _article_id(data)

    content = data.get("content")
    if not isinstance(content, str):
        raise _fail("invalid_content_type", "Invalid content type. Expected a string.", "content")

    content = content.strip()
    if not content:
        raise _fail("empty_content", "Content is empty.", "content")

    content = sanitize(content)
    if len(content) > limit:
        raise ValidationAppError(
            code="content_too_long",
            message="Content is too long.",
            details={"field": "content", "max_value": limit, "actual_value": len(content)},
        )

    return CommentSubmission(token=token, article_id=article_id, content=content)


def validate_article_lookup(data: FormData) -> int:
    """Validate /getarticleinfo query parameters and return the article id."""
    return _article_id(data)


def validate_article_creation(data: FormData) -> ArticleSubmission:
    """Validate an /addarticle form.

    Every one of title, description, link and category must be present and
    non-empty after trimming; any single gap fails the whole request with the
    same message.

    Raises:
        ValidationAppError: If the password is not a string or information is incomplete.
    """
    password = data.get("password")
    if not isinstance(password, str):
        raise _fail("invalid_password_type", "Invalid password type. Expected a string.", "password")

    fields: dict[str, str] = {}
    for name in ("title", "description", "link", "category"):
        value = data.get(name)
        fields[name] = value.strip() if isinstance(value, str) else ""

    lengths = [len(value) for value in fields.values()]
    if lengths[0] * lengths[1] * lengths[2] * lengths[3] == 0:
        raise _fail("information_incomplete", "Information incomplete.")

    return ArticleSubmission(password=password, **fields)
