"""Editor collaborator contract and language tables"""

from codeshell.editor.buffers import EditorBuffers, MemoryBuffers
from codeshell.editor.languages import display_name_for, icon_for, language_for

__all__ = ["EditorBuffers", "MemoryBuffers", "display_name_for", "icon_for", "language_for"]
