"""Dependency injection container."""
from dependency_injector import containers, providers

from backoffice.repositories.company_repository import CompanyRepository
from backoffice.repositories.invoice_repository import InvoiceRepository
from backoffice.repositories.operation_repository import OperationRepository
from backoffice.repositories.password_reset_repository import PasswordResetRepository
from backoffice.repositories.role_repository import RoleRepository
from backoffice.repositories.ship_repository import ShipRepository
from backoffice.repositories.user_repository import UserRepository

from backoffice.services.activity_logger import ActivityLogger
from backoffice.services.auth_service import AuthService
from backoffice.services.email_service import EmailService
from backoffice.services.invoice_service import InvoiceService
from backoffice.services.jwt_service import JwtService
from backoffice.services.password_reset_service import PasswordResetService
from backoffice.services.user_directory_service import UserDirectoryService
from backoffice.services.user_service import UserService


class Container(containers.DeclarativeContainer):
    """
    Application dependency injection container.

    Usage:
        container = Container()
        container.config.from_dict(settings)
        container.db_session.override(db.session)

        invoice_service = container.invoice_service()
    """

    # Configuration
    config = providers.Configuration()

    # Database session - must be overridden with actual db.session
    db_session = providers.Dependency()

    # ==================
    # Repositories
    # ==================

    user_repository = providers.Factory(
        UserRepository,
        session=db_session
    )

    role_repository = providers.Factory(
        RoleRepository,
        session=db_session
    )

    password_reset_repository = providers.Factory(
        PasswordResetRepository,
        session=db_session
    )

    invoice_repository = providers.Factory(
        InvoiceRepository,
        session=db_session
    )

    company_repository = providers.Factory(
        CompanyRepository,
        session=db_session
    )

    ship_repository = providers.Factory(
        ShipRepository,
        session=db_session
    )

    operation_repository = providers.Factory(
        OperationRepository,
        session=db_session
    )

    # ==================
    # Infrastructure
    # ==================

    jwt_service = providers.Singleton(
        JwtService,
        secret_key=config.jwt.secret_key,
        issuer=config.jwt.issuer,
        access_token_ttl=config.jwt.access_token_expires,
        refresh_token_ttl=config.jwt.refresh_token_expires,
    )

    email_service = providers.Singleton(
        EmailService,
        smtp_host=config.smtp.host,
        smtp_port=config.smtp.port,
        smtp_user=config.smtp.user,
        smtp_password=config.smtp.password,
        from_email=config.smtp.from_email,
        use_tls=config.smtp.use_tls,
        frontend_url=config.frontend_url,
    )

    activity_logger = providers.Singleton(
        ActivityLogger
    )

    # ==================
    # Auth
    # ==================

    user_directory = providers.Factory(
        UserDirectoryService,
        user_repository=user_repository,
        max_failed_attempts=config.login.max_failed_attempts,
        lock_minutes=config.login.lock_minutes,
    )

    password_reset_service = providers.Factory(
        PasswordResetService,
        user_repository=user_repository,
        reset_repository=password_reset_repository
    )

    auth_service = providers.Factory(
        AuthService,
        user_repository=user_repository,
        role_repository=role_repository,
        user_directory=user_directory,
        jwt_service=jwt_service,
        password_reset_service=password_reset_service,
        email_service=email_service,
        activity_logger=activity_logger,
    )

    user_service = providers.Factory(
        UserService,
        user_repository=user_repository,
        role_repository=role_repository,
        activity_logger=activity_logger,
    )

    # ==================
    # Invoicing
    # ==================

    invoice_service = providers.Factory(
        InvoiceService,
        invoice_repository=invoice_repository,
        company_repository=company_repository,
        ship_repository=ship_repository,
        operation_repository=operation_repository,
        activity_logger=activity_logger,
    )


def container_settings(app_config) -> dict:
    """Map Flask config keys onto the container's configuration tree."""
    return {
        "jwt": {
            "secret_key": app_config["JWT_SECRET_KEY"],
            "issuer": app_config["JWT_ISSUER"],
            "access_token_expires": app_config["JWT_ACCESS_TOKEN_EXPIRES"],
            "refresh_token_expires": app_config["JWT_REFRESH_TOKEN_EXPIRES"],
        },
        "login": {
            "max_failed_attempts": app_config["LOGIN_MAX_FAILED_ATTEMPTS"],
            "lock_minutes": app_config["LOGIN_LOCK_MINUTES"],
        },
        "smtp": {
            "host": app_config.get("SMTP_HOST", ""),
            "port": app_config.get("SMTP_PORT", 587),
            "user": app_config.get("SMTP_USER", ""),
            "password": app_config.get("SMTP_PASSWORD", ""),
            "from_email": app_config.get("SMTP_FROM_EMAIL", "noreply@backoffice.local"),
            "use_tls": app_config.get("SMTP_USE_TLS", True),
        },
        "frontend_url": app_config.get("FRONTEND_URL", "http://localhost:4200"),
    }
