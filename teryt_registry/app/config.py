from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote_plus


def _parse_simple_env(text: str) -> Dict[str, str]:
    """KEY=VALUE per linia; `export KEY=...` i wartości w cudzysłowach też przechodzą."""
    out: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        key, value = (part.strip() for part in line.split("=", 1))
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        out[key] = value
    return out


def _read_env_file(path: Path) -> Dict[str, str]:
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {path}")
    return _parse_simple_env(path.read_text(encoding="utf-8"))


def load_env_stack(project_root: Path | None = None) -> List[Path]:
    """Ładuje pliki z env/stack.env (ENV_FILES=a.env,b.env) jako wartości domyślne.

    Brak env/stack.env nie jest błędem: wtedy konfiguracja idzie tylko z prawdziwego env
    (CI, testy, kontener).
    """
    if project_root is None:
        project_root = Path(__file__).resolve().parents[2]

    stack_path = project_root / "env" / "stack.env"
    if not stack_path.exists():
        return []

    stack = _read_env_file(stack_path)

    env_files = stack.get("ENV_FILES", "").strip()
    if not env_files:
        raise RuntimeError("env/stack.env must define ENV_FILES=...")

    loaded: List[Path] = []
    merged: Dict[str, str] = {}

    for rel in [x.strip() for x in env_files.split(",") if x.strip()]:
        p = (project_root / rel).resolve()
        merged.update(_read_env_file(p))
        loaded.append(p)

    # Set defaults from files, but allow real environment to override
    for k, v in merged.items():
        os.environ.setdefault(k, v)

    return loaded


@dataclass(frozen=True)
class Settings:
    # --- ENV ---
    env_name: str
    log_level: str

    # --- DB ---
    database_url: str
    db_schema: Optional[str]
    db_statement_timeout_ms: int
    db_pool_timeout_s: int

    # --- AUTH (token tylko konsumujemy, nie wydajemy) ---
    auth_jwt_secret: str
    auth_jwt_alg: str

    # --- TERYT (słowniki referencyjne) ---
    teryt_import_dir: str

    @property
    def db_dsn(self) -> str:
        return self.database_url

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith("postgresql")


_settings_cache: dict[str, Settings] = {}


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, "").strip() or default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name}={raw!r} (must be int)") from e


def clear_settings_cache() -> None:
    _settings_cache.clear()


def get_settings(project_root: Path | None = None) -> Settings:
    cache_key = os.getenv("ENV_NAME", "").strip().lower() or "default"
    if cache_key in _settings_cache:
        return _settings_cache[cache_key]

    loaded = load_env_stack(project_root=project_root)

    def req(name: str) -> str:
        v = os.getenv(name, "").strip()
        if not v:
            raise RuntimeError(
                f"Missing required env var: {name} "
                f"(loaded: {[str(p) for p in loaded]})"
            )
        return v

    # --- DB URL: albo gotowy DATABASE_URL, albo składamy z części ---
    database_url = os.getenv("DATABASE_URL", "").strip()
    if not database_url:
        pwd = quote_plus(req("DB_PASSWORD"))
        database_url = (
            f"postgresql+psycopg://"
            f"{req('DB_USER')}:{pwd}@{req('DB_HOST')}:{int(req('DB_PORT'))}/{req('DB_NAME')}"
        )

    # SQLite nie zna schematów: pusty DB_SCHEMA = brak schematu
    db_schema = os.getenv("DB_SCHEMA", "").strip() or None

    s = Settings(
        # --- ENV ---
        env_name=os.getenv("ENV_NAME", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),

        # --- DB ---
        database_url=database_url,
        db_schema=db_schema,
        db_statement_timeout_ms=_int_env("DB_STATEMENT_TIMEOUT_MS", "5000"),
        db_pool_timeout_s=_int_env("DB_POOL_TIMEOUT_S", "10"),

        # --- AUTH ---
        auth_jwt_secret=req("AUTH_JWT_SECRET"),
        auth_jwt_alg=os.getenv("AUTH_JWT_ALG", "HS256"),

        # --- TERYT ---
        teryt_import_dir=os.getenv("TERYT_IMPORT_DIR", "var/teryt/imports").strip() or "var/teryt/imports",
    )

    _settings_cache[cache_key] = s
    return s
