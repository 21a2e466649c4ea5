"""HTTP header builders."""

from urllib.parse import quote


def content_disposition_attachment(filename: str) -> str:
    """Build an RFC 5987 attachment header value for a display name.

    Every byte outside the unreserved set is percent-encoded, so quotes,
    semicolons, CR and LF in the name cannot alter the header.
    """
    return f"attachment; filename*=UTF-8''{quote(filename, safe='')}"
