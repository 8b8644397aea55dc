"""Initialize-once registry of Firebase web app configurations.

Mirrors the SDK idiom ``getApps().length ? getApp() : initializeApp(config)``:
the first call for a name registers the app, later calls return it unchanged.
"""

from dataclasses import dataclass

from loguru import logger
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.servemee.runtime.config.config_data import FirebaseConfig

DEFAULT_APP_NAME = "[DEFAULT]"


class FirebaseOptions(BaseModel):
    """Client-side Firebase configuration (the ``firebaseConfig`` object)."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    api_key: str | None = None
    auth_domain: str | None = None
    project_id: str
    storage_bucket: str | None = None
    messaging_sender_id: str | None = None
    app_id: str | None = None

    @classmethod
    def from_config(cls, config: FirebaseConfig) -> "FirebaseOptions":
        return cls(
            api_key=config.api_key,
            auth_domain=config.auth_domain,
            project_id=config.project_id,
            storage_bucket=config.storage_bucket,
            messaging_sender_id=config.messaging_sender_id,
            app_id=config.app_id,
        )


@dataclass(frozen=True)
class FirebaseApp:
    name: str
    options: FirebaseOptions


class FirebaseAppRegistry:
    def __init__(self) -> None:
        self._apps: dict[str, FirebaseApp] = {}

    def get_apps(self) -> list[FirebaseApp]:
        return list(self._apps.values())

    def get_app(self, name: str = DEFAULT_APP_NAME) -> FirebaseApp:
        try:
            return self._apps[name]
        except KeyError:
            raise LookupError(f"Firebase app {name!r} has not been initialized") from None

    def initialize_app(
        self, options: FirebaseOptions, name: str = DEFAULT_APP_NAME
    ) -> FirebaseApp:
        """Register ``options`` under ``name`` unless an app already exists there."""
        existing = self._apps.get(name)
        if existing is not None:
            if existing.options != options:
                logger.debug(
                    "Firebase app {} already initialized; ignoring new options", name
                )
            return existing

        app = FirebaseApp(name=name, options=options)
        self._apps[name] = app
        logger.info("Initialized Firebase app {} for project {}", name, options.project_id)
        return app

    def delete_app(self, name: str = DEFAULT_APP_NAME) -> None:
        self._apps.pop(name, None)
