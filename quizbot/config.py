from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import SecretStr

from .services.completion import CompletionIdentity
from .services.navigation import NavigationTimings


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8')

    # Telegram Bot Token
    BOT_TOKEN: SecretStr

    # Title of the questionnaire served by the bot
    QUIZ_TITLE: str = "funnel"

    # --- Completion Settings ---
    COMPLETION_WEBHOOK_URL: str | None = None  # Skipped silently when empty
    COMPLETION_WEBHOOK_TIMEOUT: float = 10.0
    REDIRECT_URL: str = "https://spanishvip.com/sale/new-year/adults/"

    # Fixed sender identity attached to every completion notification
    COMPLETION_NAME: str = "Spanish Learner"
    COMPLETION_EMAIL: str = "Spanishlearner@fallsale.com"
    COMPLETION_QUIZ_ID: str = "fall-sale"

    # --- Transition delays (milliseconds) ---
    QUESTION_FADE_MS: int = 50
    INTERSTITIAL_ENTER_MS: int = 300
    INTERSTITIAL_EXIT_MS: int = 500

    # --- Webhook Settings ---
    WEBHOOK_HOST: str | None = None
    WEBHOOK_PATH: str = "/webhook/bot"
    WEB_SERVER_HOST: str = "0.0.0.0"
    WEB_SERVER_PORT: int = 8080

    # --- Database settings ---
    DATABASE_URL: str | None = None  # Full override, e.g. sqlite+aiosqlite:///quiz.db
    POSTGRES_USER: str = "quiz"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "quiz"
    POSTGRES_HOST: str = 'db'
    POSTGRES_PORT: int = 5432

    @property
    def database_url(self) -> str:
        """ Correctly constructs the database URL. """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def completion_identity(self) -> CompletionIdentity:
        return CompletionIdentity(
            name=self.COMPLETION_NAME,
            email=self.COMPLETION_EMAIL,
            quiz_id=self.COMPLETION_QUIZ_ID,
        )

    @property
    def navigation_timings(self) -> NavigationTimings:
        return NavigationTimings(
            question_fade=self.QUESTION_FADE_MS / 1000,
            interstitial_enter=self.INTERSTITIAL_ENTER_MS / 1000,
            interstitial_exit=self.INTERSTITIAL_EXIT_MS / 1000,
        )

# Create a single instance of the settings
settings = Settings()
