import os

# Width of groups.code and of the join request field
JOIN_CODE_MAX_LENGTH = 12


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings read from the environment"""

    def __init__(self):
        # Get DATABASE_URL from environment, with fallback to SQLite for local development
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./app/db/split_service.db")

        self.secret_key = os.getenv("SECRET_KEY", "your_secret_key")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")

        self.debug = _env_bool("DEBUG")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

        self.join_code_length = int(os.getenv("JOIN_CODE_LENGTH", "6"))
        self.join_code_max_attempts = int(os.getenv("JOIN_CODE_MAX_ATTEMPTS", "10"))

        if not 1 <= self.join_code_length <= JOIN_CODE_MAX_LENGTH:
            raise ValueError(f"JOIN_CODE_LENGTH must be between 1 and {JOIN_CODE_MAX_LENGTH}, got {self.join_code_length}")


settings = Settings()
