"""Application configuration and environment settings"""
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class LedgerLimits(BaseModel):
    """Input bounds enforced on every append"""
    max_note_length: int = Field(1024, ge=0, description="Maximum characters in a contribution note")
    max_batch_size: int = Field(100, ge=1, description="Maximum notes in one gasless batch")

class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Storage
    DATABASE_URL: str = Field("sqlite:///contributions.db", description="SQLAlchemy database URL")

    # Access policy used when the database holds no policy yet
    CUSTODIAN: str = Field("custodian", description="Initial custodian identity")
    MINIMUM_CONTRIBUTION: int = Field(0, ge=0, description="Initial minimum value contribution")

    # Input bounds
    MAX_NOTE_LENGTH: int = Field(1024, ge=0, description="Maximum characters in a contribution note")
    MAX_BATCH_SIZE: int = Field(100, ge=1, description="Maximum notes in one gasless batch")

    LOG_LEVEL: str = Field("INFO", description="Root logging level")
    OUTPUT_DIR: str = Field("/output", description="Directory for summary reports")

    @property
    def ledger_limits(self) -> LedgerLimits:
        """Get input bounds as a separate model"""
        return LedgerLimits(
            max_note_length=self.MAX_NOTE_LENGTH,
            max_batch_size=self.MAX_BATCH_SIZE
        )

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True
    )

settings = Settings()
