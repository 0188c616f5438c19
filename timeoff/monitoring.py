import sentry_sdk

from .config import Settings


def configure_error_monitoring(settings: Settings) -> bool:
    if not settings.sentry_dsn:
        return False
    sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.env, traces_sample_rate=0.0)
    return True
