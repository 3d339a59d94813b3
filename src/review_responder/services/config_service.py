"""
Config Service - Integration credentials stored in system_config
"""
from dataclasses import dataclass
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotConfiguredError
from ..core.logging import get_logger
from ..models.database import SystemConfig
from ..models.schemas import IntegrationConfigUpdate, IntegrationStatusResponse

logger = get_logger(__name__)


@dataclass(frozen=True)
class GoogleCredentials:
    client_id: str
    client_secret: str


def mask_secret(value: str) -> str:
    """Keep the last four characters visible"""
    if not value:
        return ""
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


class ConfigService:
    """Service for integration settings"""

    @staticmethod
    def get_config(db: Session) -> SystemConfig:
        """Get the settings row, creating an empty one on first use"""
        config = db.query(SystemConfig).order_by(SystemConfig.id).first()
        if config is None:
            config = SystemConfig()
            db.add(config)
            db.commit()
            db.refresh(config)
            logger.info("Created empty integration config")
        return config

    @staticmethod
    def update_config(db: Session, update_data: IntegrationConfigUpdate) -> SystemConfig:
        config = ConfigService.get_config(db)

        for field, value in update_data.model_dump(exclude_unset=True).items():
            setattr(config, field, (value or "").strip())

        db.commit()
        db.refresh(config)

        logger.info("Updated integration config")
        return config

    @staticmethod
    def google_credentials(db: Session) -> GoogleCredentials:
        """
        Resolve the OAuth client identity

        Stored values win; environment values are the fallback.

        Raises:
            NotConfiguredError: If either half is missing
        """
        config = ConfigService.get_config(db)
        client_id = config.google_client_id or settings.GOOGLE_CLIENT_ID
        client_secret = config.google_client_secret or settings.GOOGLE_CLIENT_SECRET

        if not client_id or not client_secret:
            raise NotConfiguredError("Google OAuth credentials not configured")
        return GoogleCredentials(client_id=client_id, client_secret=client_secret)

    @staticmethod
    def openai_api_key(db: Session) -> str:
        """
        Raises:
            NotConfiguredError: If no API key is stored or set in the environment
        """
        api_key = ConfigService.get_config(db).openai_api_key or settings.OPENAI_API_KEY
        if not api_key:
            raise NotConfiguredError("OpenAI API key not configured")
        return api_key

    @staticmethod
    def status(db: Session) -> IntegrationStatusResponse:
        config = ConfigService.get_config(db)
        client_id = config.google_client_id or settings.GOOGLE_CLIENT_ID
        client_secret = config.google_client_secret or settings.GOOGLE_CLIENT_SECRET
        api_key = config.openai_api_key or settings.OPENAI_API_KEY

        return IntegrationStatusResponse(
            google_configured=bool(client_id and client_secret),
            openai_configured=bool(api_key),
            google_client_id=client_id,
            google_client_secret=mask_secret(client_secret),
            openai_api_key=mask_secret(api_key),
            updated_at=config.updated_at,
        )


# Create singleton instance
config_service = ConfigService()
