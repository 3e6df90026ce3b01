from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite+aiosqlite:///./ledger.db", alias="DATABASE_URL")

    currency: str = Field("KES", alias="CURRENCY")
    default_academic_year: str = Field("2024/2025", alias="DEFAULT_ACADEMIC_YEAR")
    # Comma separated, in promotion order
    default_grades: str = Field(
        "GRADE 1,GRADE 2,GRADE 3,GRADE 4,GRADE 5,GRADE 6,GRADE 7,GRADE 8",
        alias="DEFAULT_GRADES",
    )
    receipt_prefix: str = Field("RCP-", alias="RECEIPT_PREFIX")
    archive_arrears_policy: str = Field("carry", alias="ARCHIVE_ARREARS_POLICY")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def grade_sequence(self) -> List[str]:
        return [g.strip() for g in self.default_grades.split(",") if g.strip()]


settings = Settings()
