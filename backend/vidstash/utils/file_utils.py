"""File utility functions"""
from urllib.parse import quote

# Common filesystem limit on a single file name, in bytes
MAX_FILENAME_BYTES = 255


def sanitize_title(title: str) -> str:
    """Keep only alphanumeric and whitespace characters of a title"""
    return "".join(c for c in title if c.isalnum() or c.isspace())


def build_filename(display_name: str, file_id: str, ext: str) -> str:
    """Compose `<display name>-<id>.<ext>`, shortening the name to fit the limit"""
    suffix = f"-{file_id}.{ext}"
    budget = MAX_FILENAME_BYTES - len(suffix.encode("utf-8"))
    # cut on a character boundary: a trailing partial sequence is dropped
    name = display_name.encode("utf-8")[:budget].decode("utf-8", "ignore")
    return f"{name}{suffix}"


def download_url(filename: str) -> str:
    """URL path under which a stored file is served"""
    return f"/downloads/{quote(filename)}"
