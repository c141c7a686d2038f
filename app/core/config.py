from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv(override=True)

class Settings(BaseSettings):
    PROJECT_NAME: str = "GarmentNFT"
    # Application settings
    PORT: int = 5050
    HOST: str | None = None
    VERSION: str | None = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # SQLAlchemy database URL
    DATABASE_URL: str

    # Login configuration
    ENCODE_KEY: str | None
    ENCODE_ALGORITHM: str = "HS256"
    WALLET_TOKEN_EXPIRE_SECONDS: int = 3600 # 1 hour
    ACCOUNT_TOKEN_EXPIRE_SECONDS: int = 7 * 24 * 3600 # 7 days
    NONCE_EXPIRY_SECONDS: int = 300 # 5 minutes

    # Wallet identities
    WALLET_CHAIN: str = "ethereum"
    WALLET_EMAIL_DOMAIN: str = "wallet.temp"

    # Debug settings
    DEBUG: bool = False

    class Config:
        env_file = ".env"

# Instantiate the settings
settings = Settings()
