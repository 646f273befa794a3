"""
A source document: its text buffer, language and origin
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from decl_reorganizer.core.comment_helper import CodeLanguage, get_code_language
from decl_reorganizer.core.text_buffer import TextBuffer

logger = logging.getLogger(__name__)


@dataclass
class Document:
    """Source text being cleaned up"""

    buffer: TextBuffer
    language: CodeLanguage = CodeLanguage.UNKNOWN
    path: Path | None = None
    newline: str = "\n"

    @property
    def name(self) -> str:
        return self.path.name if self.path else "<memory>"

    @property
    def text(self) -> str:
        return self.buffer.text

    @classmethod
    def from_text(
        cls,
        text: str,
        language: CodeLanguage = CodeLanguage.UNKNOWN,
        cursor_offset: int = 0,
    ) -> "Document":
        return cls(buffer=TextBuffer(text, cursor_offset), language=language)

    @classmethod
    def from_file(cls, path: Path) -> "Document":
        """Load a file, normalizing line breaks to \\n"""
        with open(path, "r", encoding="utf-8", newline="") as f:
            content = f.read()

        newline = "\r\n" if "\r\n" in content else "\n"
        text = content.replace("\r\n", "\n")
        logger.debug(f"Loaded {path} ({len(text)} chars)")
        return cls(
            buffer=TextBuffer(text),
            language=get_code_language(path),
            path=path,
            newline=newline,
        )

    def save(self, path: Path | None = None) -> Path:
        """Write the buffer back with the original line breaks"""
        target = path or self.path
        if target is None:
            raise ValueError("Document has no path to save to")

        with open(target, "w", encoding="utf-8", newline=self.newline) as f:
            f.write(self.buffer.text)
        logger.debug(f"Saved {target}")
        return target
