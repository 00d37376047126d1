from app.config import settings
from app.services.upload_relay import UploadRelay


def get_upload_relay() -> UploadRelay:
    """Relay wired to the configured scoring service; override in tests to point at a mock upstream."""
    return UploadRelay(
        settings.scoring_service_url,
        field_name=settings.scoring_field_name,
        timeout=settings.scoring_timeout_seconds,
    )
