# filename: config.py
# Configuração explícita do CMS, carregada do .env uma vez na inicialização.
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent


def _env_path(name: str, default: Path) -> Path:
    value = (os.getenv(name) or "").strip()
    return Path(value).expanduser() if value else default


@dataclass
class Settings:
    content_dir: Path
    credentials_path: Path
    history_path: Path
    secret_key: str = "chave_secreta_para_sessao"
    admin_username: str = "admin"
    admin_password: str = "secret"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        # .env sempre em UTF-8
        load_dotenv(encoding="utf-8")
        return cls(
            content_dir=_env_path("CMS_CONTENT_DIR", BASE_DIR / "data"),
            credentials_path=_env_path("CMS_CREDENTIALS_PATH", BASE_DIR / "users.json"),
            history_path=_env_path("CMS_HISTORY_PATH", BASE_DIR / "history.json"),
            secret_key=os.getenv("SECRET_KEY", "chave_secreta_para_sessao"),
            admin_username=os.getenv("CMS_ADMIN_USERNAME", "admin").strip(),
            admin_password=os.getenv("CMS_ADMIN_PASSWORD", "secret"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            debug=os.getenv("FLASK_DEBUG", "0").strip().lower() in {"1", "true", "yes"},
        )
