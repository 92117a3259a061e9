from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

APP_ROOT = Path(__file__).resolve().parent.parent.parent

load_dotenv(dotenv_path=APP_ROOT / ".env")


@dataclass(frozen=True)
class Settings:
    threads_dir: str
    bird_bin: str
    bird_timeout: int
    auth_token: str | None
    ct0: str | None
    host: str
    port: int
    log_level: str

    @staticmethod
    def from_env() -> "Settings":
        def _i(name: str, default: str) -> int:
            return int(os.getenv(name, default).strip())

        def _opt(name: str) -> str | None:
            value = os.getenv(name, "").strip()
            return value or None

        return Settings(
            threads_dir=os.getenv("THREADS_DIR", str(APP_ROOT / "threads")).strip(),
            bird_bin=os.getenv("BIRD_BIN", "bird").strip(),
            bird_timeout=_i("BIRD_TIMEOUT", "30"),
            auth_token=_opt("AUTH_TOKEN"),
            ct0=_opt("CT0"),
            host=os.getenv("HOST", "0.0.0.0").strip(),
            port=_i("PORT", "3004"),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        )

    def bird_env(self) -> dict[str, str]:
        """Environment for the bird subprocess, with credentials made explicit."""
        env = dict(os.environ)
        if self.auth_token:
            env["AUTH_TOKEN"] = self.auth_token
        if self.ct0:
            env["CT0"] = self.ct0
        return env
