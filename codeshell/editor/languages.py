"""
Language lookup by file extension.

The editor never inspects content; everything here is derived from the
file name alone.
"""

PLAIN_TEXT = "plaintext"

# extension -> (language hint, display name, icon)
LANGUAGES: dict[str, tuple[str, str, str]] = {
    "html": ("html", "HTML", "🌐"),
    "css": ("css", "CSS", "🎨"),
    "js": ("javascript", "JavaScript", "📜"),
    "json": ("json", "JSON", "🧾"),
    "md": ("markdown", "Markdown", "📝"),
    "txt": (PLAIN_TEXT, "Plain Text", "📄"),
}

DEFAULT_ICON = "📄"


def _extension(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def language_for(filename: str) -> str:
    """Editor language hint for a file name (unknown -> plaintext)"""
    entry = LANGUAGES.get(_extension(filename))
    return entry[0] if entry else PLAIN_TEXT


def display_name_for(filename: str) -> str:
    """Human-readable language name for the status bar"""
    entry = LANGUAGES.get(_extension(filename))
    return entry[1] if entry else "Plain Text"


def icon_for(filename: str) -> str:
    """Icon shown next to the file in the explorer and tab bar"""
    entry = LANGUAGES.get(_extension(filename))
    return entry[2] if entry else DEFAULT_ICON
