from pydantic_settings import BaseSettings, SettingsConfigDict
class Settings(BaseSettings):
    APP_ENV: str = "dev"
    APP_SECRET: str
    DB_URL: str
    DB_TIMEOUT_S: float = 15.0
    JWT_ISS: str = "qrmenu"
    JWT_EXP_MIN: int = 12*60
    TZ: str = "UTC"

    # public menu
    MENU_PAGE_SIZE: int = 12
    CATEGORY_ORDER: list[str] = ["Platos Principales", "Platos Ejecutivos", "Platos Especiales"]
    CURRENCY_SYMBOL: str = "$"

    # anonymous cart
    CART_FETCH_LIMIT: int = 100
    SESSION_COOKIE: str = "cart_session_id"
    SESSION_HEADER: str = "X-Cart-Session"

    # staff notification
    NOTIFY_BACKEND: str = "link"  # link | whatsapp_cloud
    WHATSAPP_API_URL: str = "https://graph.facebook.com/v19.0"
    WHATSAPP_TOKEN: str | None = None
    WHATSAPP_PHONE_NUMBER_ID: str | None = None
    NOTIFY_TIMEOUT_S: float = 10.0
    DEFAULT_COUNTRY_CODE: str = "57"

    # reservations
    RESERVATION_FIRST_SLOT: str = "12:00"
    RESERVATION_LAST_SLOT: str = "22:30"
    MAX_PARTY_SIZE: int = 20

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
settings = Settings()
