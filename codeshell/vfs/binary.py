"""
Binary file detection for the local file loader.

The editor only holds text. Files that look binary, either by extension or
because their first bytes contain NUL characters, are refused at import.
"""

# Extensions that are never loaded as text
BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {
        # Images
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".webp", ".tiff", ".tif", ".psd",
        # Audio / video
        ".mp3", ".wav", ".ogg", ".flac", ".aac", ".m4a", ".mp4", ".avi", ".mkv", ".mov", ".webm",
        # Archives
        ".zip", ".tar", ".gz", ".bz2", ".xz", ".7z", ".rar", ".jar",
        # Executables and libraries
        ".exe", ".dll", ".so", ".dylib", ".bin", ".o", ".a", ".pyc", ".class", ".wasm",
        # Documents
        ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".odt",
        # Fonts
        ".ttf", ".otf", ".woff", ".woff2", ".eot",
        # Data
        ".db", ".sqlite", ".sqlite3", ".pickle", ".pkl", ".npy", ".parquet",
    }
)  # fmt: skip

# How many leading bytes to inspect when sniffing content
SNIFF_BYTES = 8192


def has_binary_extension(filename: str) -> bool:
    """Check if a file name carries a known binary extension.

    Args:
        filename: Name or path to check (just needs the extension)

    Returns:
        True if the extension is in BINARY_EXTENSIONS
    """
    dot_idx = filename.rfind(".")
    if dot_idx == -1:
        return False
    return filename[dot_idx:].lower() in BINARY_EXTENSIONS


def looks_binary(data: bytes) -> bool:
    """Sniff raw content: a NUL byte near the start means binary"""
    return b"\x00" in data[:SNIFF_BYTES]


def is_binary_file(filename: str, data: bytes | None = None) -> bool:
    """Check extension first, then content if it was provided"""
    if has_binary_extension(filename):
        return True
    return data is not None and looks_binary(data)
