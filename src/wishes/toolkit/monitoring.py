import sentry_sdk
from configmanager import Config
from sentry_sdk.integrations.aiohttp import AioHttpIntegration
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration


def setup_sentry(config: Config) -> bool:
    """
    Enables error reporting to Sentry if a DSN is configured.

    :returns: Whether Sentry was initialized.
    """

    dsn = config.sentry.dsn.value
    if not dsn:
        return False

    traces_sample_rate = None
    if (config_sample_rate := config.sentry.traces_sample_rate.value) is not None:
        traces_sample_rate = float(config_sample_rate)

    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=traces_sample_rate,
        ignore_errors=[KeyboardInterrupt],
        integrations=[
            AioHttpIntegration(),
            AsyncioIntegration(),
            SqlalchemyIntegration(),
        ],
    )
    return True
