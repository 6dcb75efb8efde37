"""Attachment display helpers"""

SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format

    Examples:
        0 -> "0 Bytes", 1536 -> "1.5 KB", 2485760 -> "2.37 MB"
    """
    if size_bytes <= 0:
        return "0 Bytes"

    exponent = 0
    value = float(size_bytes)
    while value >= 1024 and exponent < len(SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    number = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{number} {SIZE_UNITS[exponent]}"


def get_file_kind(mime_type: str) -> str:
    """Coarse file category used to pick an icon"""
    mime_type = mime_type or ""
    if mime_type.startswith("image/"):
        return "image"
    if "pdf" in mime_type:
        return "pdf"
    if "spreadsheet" in mime_type or "excel" in mime_type:
        return "spreadsheet"
    if "word" in mime_type or "document" in mime_type:
        return "document"
    return "file"
