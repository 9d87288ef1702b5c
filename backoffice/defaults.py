"""Setting defaults, importable without reading the environment."""

DEFAULT_JWT_EXPIRATION_MINUTES = 1440
DEFAULT_JWT_REFRESH_EXPIRATION_DAYS = 7
DEFAULT_JWT_ISSUER = "maritime-backoffice"
DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"
DEFAULT_MAX_FAILED_ATTEMPTS = 5
DEFAULT_LOCK_MINUTES = 30
