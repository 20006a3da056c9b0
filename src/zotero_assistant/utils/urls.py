"""
URL helpers.
"""

import re
from urllib.parse import parse_qs, unquote, urlparse

# Path fragments of PDF renderers, screenshot services and fetch proxies
WRAPPER_PATTERN = re.compile(
    r"pdfrenderer|pdf\.svc|htmltopdf|html2pdf|render.*pdf|pdf.*render|"
    r"webshot|screenshot|snapshot|proxy\.php|fetch\.php",
    re.IGNORECASE,
)

# Query parameters that commonly carry the wrapped URL, in lookup order
URL_PARAM_NAMES = ("url", "source", "target", "uri", "link", "src")


def unwrap_url(raw: str) -> str:
    """
    Extract the underlying resource URL from a wrapper or proxy URL.

    A candidate parameter value is accepted when it decodes to an http(s)
    URL and either the path looks like a known wrapper service or the path
    has at least two segments. Anything else returns ``raw`` unchanged.

    Examples:
        >>> unwrap_url("https://r.example/pdfrenderer.svc?url=https%3A%2F%2Fx.org%2Fa.pdf")
        'https://x.org/a.pdf'
        >>> unwrap_url("https://search.example/?q=https://x.org")
        'https://search.example/?q=https://x.org'
    """
    try:
        parsed = urlparse(raw)
    except (ValueError, TypeError):
        return raw
    if not parsed.scheme or not parsed.netloc:
        return raw

    is_wrapper = bool(WRAPPER_PATTERN.search(parsed.path))
    segments = [segment for segment in parsed.path.split("/") if segment]
    params = parse_qs(parsed.query)

    for name in URL_PARAM_NAMES:
        values = params.get(name)
        if not values or not values[0]:
            continue
        decoded = unquote(values[0])
        if not decoded.startswith(("http://", "https://")):
            continue
        if is_wrapper or len(segments) >= 2:
            return decoded

    return raw


def last_path_segment(url: str) -> str:
    """Final non-empty path segment of ``url`` without query or fragment."""
    try:
        path = urlparse(url).path
    except (ValueError, TypeError):
        return ""
    segments = [segment for segment in path.split("/") if segment]
    return unquote(segments[-1]) if segments else ""
