# filename: documents.py
# Document Store: arquivos do diretório de conteúdo (documentos e imagens).
import logging
import re
from pathlib import Path
from typing import Dict, FrozenSet, Iterator, Tuple, Union

import markdown

from errors import AlreadyExists, InvalidName, NotFound
from models import FileEntry, FileKind

logger = logging.getLogger(__name__)

DOCUMENT_EXTENSIONS = frozenset({".md", ".txt"})
IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif"})
MARKDOWN_EXTENSIONS = frozenset({".md"})

ALLOWED_EXTENSIONS: Dict[FileKind, FrozenSet[str]] = {
    FileKind.DOCUMENT: DOCUMENT_EXTENSIONS,
    FileKind.IMAGE: IMAGE_EXTENSIONS,
    FileKind.REJECTED: frozenset(),
}

VALID_BASE_NAME = re.compile(r"[A-Za-z0-9_-]+")

Content = Union[bytes, str]


def split_name(file_name: str) -> Tuple[str, str]:
    """Separa 'nome.ext' em ('nome', '.ext'); extensão vazia se não houver."""
    name = (file_name or "").strip()
    base, dot, ext = name.rpartition(".")
    if not dot:
        return name, ""
    return base, ("." + ext) if ext else ""


def classify(file_name: str) -> FileKind:
    ext = split_name(file_name)[1].lower()
    if ext in DOCUMENT_EXTENSIONS:
        return FileKind.DOCUMENT
    if ext in IMAGE_EXTENSIONS:
        return FileKind.IMAGE
    return FileKind.REJECTED


def is_markdown(file_name: str) -> bool:
    return split_name(file_name)[1].lower() in MARKDOWN_EXTENSIONS


def validate_name(file_name: str, kind: FileKind = FileKind.DOCUMENT) -> str:
    """Valida o nome e devolve a forma normalizada (sem espaços nas pontas)."""
    base, ext = split_name(file_name)
    if not base.strip():
        raise InvalidName("Please enter a valid filename: a name is required.")
    if not ext:
        raise InvalidName("A file extension is required.")
    if not VALID_BASE_NAME.fullmatch(base):
        raise InvalidName("Please enter a valid filename: use only letters, numbers, '-' and '_'.")
    if ext.lower() not in ALLOWED_EXTENSIONS[kind]:
        raise InvalidName(f"Unsupported file extension: {ext}.")
    return base + ext


def render_markdown(text: str) -> str:
    return markdown.markdown(text, extensions=["fenced_code", "tables", "sane_lists"])


def _as_bytes(content: Content) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return content


class DocumentStore:
    def __init__(self, root):
        self.root = Path(root)

    def _path(self, file_name: str) -> Path:
        name = file_name or ""
        # Somente arquivos diretamente dentro do diretório de conteúdo
        if not name or name.startswith(".") or "/" in name or "\\" in name:
            raise NotFound(f"{file_name} does not exist.")
        return self.root / name

    def list(self) -> Iterator[str]:
        names = sorted(
            p.name for p in self.root.iterdir()
            if p.is_file() and not p.name.startswith(".")
        )
        return iter(names)

    def entries(self) -> Iterator[FileEntry]:
        return (FileEntry(name, classify(name)) for name in self.list())

    def exists(self, file_name: str) -> bool:
        try:
            return self._path(file_name).is_file()
        except NotFound:
            return False

    def ensure_available(self, file_name: str) -> None:
        if self.exists(file_name):
            raise AlreadyExists(f"{file_name} already exists.")

    def read(self, file_name: str) -> bytes:
        path = self._path(file_name)
        if not path.is_file():
            raise NotFound(f"{file_name} does not exist.")
        return path.read_bytes()

    def create(self, file_name: str, content: Content = b"", kind: FileKind = FileKind.DOCUMENT) -> str:
        name = validate_name(file_name, kind)
        self.ensure_available(name)
        self._path(name).write_bytes(_as_bytes(content))
        logger.info("Arquivo criado: %s", name)
        return name

    def write(self, file_name: str, content: Content) -> None:
        path = self._path(file_name)
        if not path.is_file():
            raise NotFound(f"{file_name} does not exist.")
        path.write_bytes(_as_bytes(content))
        logger.info("Arquivo atualizado: %s", file_name)

    def duplicate(self, source: str, new_base_name: str) -> str:
        content = self.read(source)
        target = (new_base_name or "").strip() + split_name(source)[1]
        return self.create(target, content, kind=classify(source))

    def delete(self, file_name: str) -> None:
        path = self._path(file_name)
        if not path.is_file():
            raise NotFound(f"{file_name} does not exist.")
        path.unlink()
        logger.info("Arquivo removido: %s", file_name)


def ensure_editable(file_name: str) -> None:
    # Imagens e outros binários não passam pelo editor de texto
    if classify(file_name) is not FileKind.DOCUMENT:
        raise InvalidName(f"{file_name} is not a text document and cannot be edited.")


def edit_document(documents: DocumentStore, history, file_name: str, content: Content) -> None:
    """Guarda o conteúdo atual no histórico e só então sobrescreve o arquivo."""
    ensure_editable(file_name)
    before = documents.read(file_name)
    history.record_snapshot(file_name, before.decode("utf-8", errors="replace"))
    documents.write(file_name, content)
