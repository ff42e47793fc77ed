"""URL normalization and validation for saved links."""
from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError


_http_url = TypeAdapter(AnyHttpUrl)


def normalize_url(url: str) -> str:
    """Add an ``https://`` scheme when the link has no http(s) scheme."""
    url = url.strip()
    if not url.lower().startswith(("http://", "https://")):
        return f"https://{url}"
    return url


def is_valid_url(url: str) -> bool:
    try:
        _http_url.validate_python(url)
    except PydanticValidationError:
        return False
    return True
