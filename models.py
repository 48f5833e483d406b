# filename: models.py
# Tipos simples usados pelo Document Store e pelas páginas.
from enum import Enum
from typing import NamedTuple


class FileKind(Enum):
    DOCUMENT = "document"
    IMAGE = "image"
    REJECTED = "rejected"


class FileEntry(NamedTuple):
    name: str
    kind: FileKind

    @property
    def is_image(self) -> bool:
        return self.kind is FileKind.IMAGE
