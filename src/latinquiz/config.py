import os


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Settings:
    PROJECT_NAME: str = "latinquiz"
    DEBUG: bool = _env_flag("LATINQUIZ_DEBUG")
    LOG_DIR: str = os.environ.get("LATINQUIZ_LOG_DIR", "log")
    LOG_FILE: str = "latinquiz.log"
    LOG_TO_DB: bool = _env_flag("LATINQUIZ_LOG_TO_DB")
    DB_DIR: str = os.environ.get("LATINQUIZ_DB_DIR", "db")
    DB_FILE: str = "latinquiz.db"
    SESSION_COOKIE_NAME: str = "quiz_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")

    # Seconds the feedback stays on screen before the next word
    CORRECT_ADVANCE_DELAY: float = 1.0
    FINAL_WRONG_ADVANCE_DELAY: float = 2.5

    CUSTOM_VOCAB_KEY: str = "latin-quiz-custom-vocabulary"
    REMOVED_VOCAB_KEY: str = "latin-quiz-removed-vocabulary"


settings = Settings()
