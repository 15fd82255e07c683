from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    app_name: str = "Math Striker"
    debug: bool = False

    # Question bank
    bank_version: str = "v1"
    bank_seed: int = 1337
    bank_dir: str = "question_bank/v1"
    target_multiplication: int = 1200
    target_division: int = 900
    target_fractions: int = 1400
    target_patterns: int = 700
    target_word_problems: int = 900

    # Selection
    selector_pool_cap: int = 50
    recent_ids_limit: int = 100
    recent_skill_tags_limit: int = 5

    # Progression
    rolling_window: int = 20
    adjust_every: int = 5
    weak_skill_threshold: float = 0.6
    assessment_length: int = 15

    # Storage: "memory" or "supabase"
    store_backend: str = "memory"
    supabase_url: str = ""
    supabase_service_key: str = ""

    # Telemetry: also insert events into the telemetry_events table
    telemetry_db: bool = False

    # CORS
    frontend_url: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def target_counts(self) -> dict[str, int]:
        return {
            "multiplication": self.target_multiplication,
            "division": self.target_division,
            "fractions": self.target_fractions,
            "patterns": self.target_patterns,
            "word_problems": self.target_word_problems,
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()
