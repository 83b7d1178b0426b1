from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Box Office API"
    API_V1_STR: str = "/api/v1"

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "12345"
    POSTGRES_DB: str = "boxoffice_db"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: str = ""

    # Scheduling and booking rules
    BUFFER_MINUTES: int = 15            # turnaround after each showing
    MAX_TICKETS_PER_PERSON: int = 8
    MIN_SHOWING_DURATION: int = 60
    MAX_SHOWING_DURATION: int = 240
    MIN_LEAD_MINUTES: int = 60          # showings start at least this far ahead

    SEED_ROOMS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    def assemble_db_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"


class EngineConfig(BaseModel):
    """Read-only rule set handed to the booking engine."""

    model_config = ConfigDict(frozen=True)

    buffer_minutes: int = 15
    max_tickets_per_person: int = 8
    min_duration: int = 60
    max_duration: int = 240
    min_lead_minutes: int = 60

    @classmethod
    def from_settings(cls, s: Settings) -> "EngineConfig":
        return cls(
            buffer_minutes=s.BUFFER_MINUTES,
            max_tickets_per_person=s.MAX_TICKETS_PER_PERSON,
            min_duration=s.MIN_SHOWING_DURATION,
            max_duration=s.MAX_SHOWING_DURATION,
            min_lead_minutes=s.MIN_LEAD_MINUTES,
        )


settings = Settings()
settings.DATABASE_URL = settings.assemble_db_url()
