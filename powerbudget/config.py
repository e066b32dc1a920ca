import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    NASA_POWER_BASE_URL: str = os.getenv("NASA_POWER_BASE_URL", "https://power.larc.nasa.gov")
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "30"))
    SYSTEM_EFFICIENCY: float = float(os.getenv("SYSTEM_EFFICIENCY", "0.85"))
    DEFAULT_AMBIENT_TEMP: float = float(os.getenv("DEFAULT_AMBIENT_TEMP", "25"))
    WIND_AVERAGING: str = os.getenv("WIND_AVERAGING", "mean")
    CORS_ORIGINS: list[str] = os.getenv(
        "CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"
    ).split(",")


settings = Settings()
