"""Picslify Server Configuration."""

import secrets
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    server_name: str = "Picslify"
    host: str = "0.0.0.0"
    port: int = 4000
    debug: bool = False
    log_level: str = "INFO"

    # Paths
    data_dir: Path = Path.home() / "picslify" / "data"
    media_dir: Path = Path.home() / "picslify" / "media"

    # Database
    db_path: Path = Path.home() / "picslify" / "data" / "picslify.db"

    # Media host
    media_base_url: str = "/media"
    media_folder: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024  # 5 MiB
    allowed_extensions: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif")

    # JWT
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    model_config = {"env_prefix": "PICSLIFY_"}

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.media_dir, self.db_path.parent]:
            d.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate the JWT secret if not set, persisted so tokens survive restarts."""
        if self.jwt_secret:
            return
        secret_file = self.data_dir / "jwt_secret"
        if secret_file.exists():
            self.jwt_secret = secret_file.read_text().strip()
        if not self.jwt_secret:
            self.jwt_secret = secrets.token_urlsafe(32)
            secret_file.write_text(self.jwt_secret)


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
