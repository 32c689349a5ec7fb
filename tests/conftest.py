import os

# Konfiguracja przed pierwszym importem teryt_registry (Settings czytane przy imporcie modeli).
os.environ.setdefault("ENV_NAME", "test")
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DB_SCHEMA"] = ""
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")
os.environ.setdefault("AUTH_JWT_ALG", "HS256")
os.environ.setdefault("LOG_LEVEL", "WARNING")
