# cognito_session/core/config.py
import os

from dotenv import load_dotenv


class Settings:
    def __init__(self) -> None:
        # Only load .env for local/dev. In deployed environments, env vars come from the runtime.
        self.ENV = os.getenv("ENV", "dev").strip().lower()  # dev | prod
        if self.ENV != "prod":
            load_dotenv()

        # ----------------------------
        # Cognito
        # ----------------------------
        self.COGNITO_REGION = os.getenv("COGNITO_REGION", "").strip()
        self.COGNITO_USER_POOL_ID = os.getenv("COGNITO_USER_POOL_ID", "").strip()
        self.COGNITO_APP_CLIENT_ID = os.getenv("COGNITO_APP_CLIENT_ID", "").strip()
        # Optional: enables guest access and AWS credential vending
        self.COGNITO_IDENTITY_POOL_ID = os.getenv("COGNITO_IDENTITY_POOL_ID", "").strip()

        # ----------------------------
        # Session / tokens
        # ----------------------------
        self.AUTH_TOKEN_TIMEOUT_SECONDS = float(os.getenv("AUTH_TOKEN_TIMEOUT_SECONDS", "10"))
        self.TOKEN_EXPIRY_LEEWAY_SECONDS = int(os.getenv("TOKEN_EXPIRY_LEEWAY_SECONDS", "60"))

        self._validate_prod()

    def _validate_prod(self) -> None:
        if self.ENV != "prod":
            return

        missing: list[str] = []
        if not self.COGNITO_REGION:
            missing.append("COGNITO_REGION")
        if not self.COGNITO_USER_POOL_ID:
            missing.append("COGNITO_USER_POOL_ID")
        if not self.COGNITO_APP_CLIENT_ID:
            missing.append("COGNITO_APP_CLIENT_ID")

        if self.AUTH_TOKEN_TIMEOUT_SECONDS <= 0:
            raise RuntimeError("AUTH_TOKEN_TIMEOUT_SECONDS must be positive in prod")

        if missing:
            raise RuntimeError(f"Missing required prod env vars: {', '.join(missing)}")

    @property
    def is_prod(self) -> bool:
        return self.ENV == "prod"


settings = Settings()

