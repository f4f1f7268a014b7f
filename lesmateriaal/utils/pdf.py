"""PDF link detection."""
import re
from typing import Optional

_PDF_RE = re.compile(r"\.pdf(?:$|[?/#])", re.IGNORECASE)


def is_pdf_url(url: Optional[str]) -> bool:
    """True for '.pdf' at the end or directly followed by '?', '/' or '#'."""
    if not url:
        return False
    return bool(_PDF_RE.search(url))
