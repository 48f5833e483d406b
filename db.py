# filename: db.py
# Persistência em arquivos JSON: credenciais e histórico de versões.
import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Tuple

from werkzeug.security import check_password_hash, generate_password_hash

from config import Settings
from errors import AlreadyExists

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    Mapeamento persistido em um único arquivo JSON.
    Arquivo ausente ou vazio equivale a um mapeamento vazio.
    Cada instância serializa seus próprios ciclos de leitura e escrita.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def load(self) -> dict:
        if not self.path.is_file():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            text = f.read()
        if not text.strip():
            return {}
        return json.loads(text) or {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)


class CredentialStore(JsonFileStore):
    def __contains__(self, username: str) -> bool:
        return username in self.load()

    def register(self, username: str, password: str) -> None:
        username = (username or "").strip()
        if not username or not (password or "").strip():
            raise AlreadyExists("Username and password are required. Please try again.")
        with self._lock:
            users: Dict[str, str] = self.load()
            if username in users:
                raise AlreadyExists("Sorry, that username already exists. Please try again.")
            users[username] = generate_password_hash(password)
            self._save(users)
        logger.info("Usuário registrado: %s", username)

    def verify(self, username: str, password: str) -> bool:
        stored = self.load().get((username or "").strip())
        if not stored:
            return False
        return check_password_hash(stored, password or "")


class HistoryStore(JsonFileStore):
    def record_snapshot(self, file_name: str, content: str) -> None:
        with self._lock:
            versions: Dict[str, List[str]] = self.load()
            versions.setdefault(file_name, []).append(content)
            self._save(versions)
        logger.info("Snapshot gravado para %s (%d versões)", file_name, len(versions[file_name]))

    def history(self, file_name: str) -> List[str]:
        return list(self.load().get(file_name, []))


def init_stores_and_seed_admin(settings: Settings) -> Tuple[CredentialStore, HistoryStore]:
    settings.content_dir.mkdir(parents=True, exist_ok=True)
    credentials = CredentialStore(settings.credentials_path)
    history = HistoryStore(settings.history_path)
    # Cria usuário admin caso não exista
    admin = settings.admin_username
    if admin and settings.admin_password and admin not in credentials:
        credentials.register(admin, settings.admin_password)
    return credentials, history
