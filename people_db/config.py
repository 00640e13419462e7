import logging
from collections.abc import Iterator
from contextlib import contextmanager

from pydantic import ValidationError as SettingsValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .errors import ConfigurationError, StorageConnectionError

logger = logging.getLogger(__name__)


class DBSettings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, env_prefix='DB_', env_file='.env', extra='ignore')

    host: str
    name: str
    user: str
    password: str
    port: int | None = None
    driver: str = 'postgresql+psycopg'


def load_settings() -> DBSettings:
    try:
        return DBSettings()  # type: ignore[call-arg]
    except SettingsValidationError as e:
        missing = [str(error['loc'][0]) for error in e.errors() if error['type'] == 'missing']
        if missing:
            raise ConfigurationError(f'Missing database settings: {", ".join(missing)}') from e
        raise ConfigurationError(f'Invalid database settings: {e}') from e


def connection_url(settings: DBSettings) -> URL:
    return URL.create(
        settings.driver,
        settings.user,
        settings.password,
        settings.host,
        settings.port,
        settings.name,
    )


class Base(DeclarativeBase):
    pass


class ConnectionProvider:
    """Owns one engine and one shared session for whoever constructed it.

    Nothing is opened until the first ``get_instance()`` call. ``stop()`` closes
    the session and disposes the engine; the next ``get_instance()`` reconnects.
    """

    def __init__(self, settings: DBSettings | None = None, engine: Engine | None = None) -> None:
        self._settings = settings
        self._engine = engine
        self._make_session: sessionmaker[Session] | None = None
        self._session: Session | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            settings = self._settings if self._settings is not None else load_settings()
            self._engine = create_engine(connection_url(settings))
            logger.info('Created engine for %s', self._engine.url.render_as_string(hide_password=True))
        return self._engine

    def make_session(self) -> Session:
        if self._make_session is None:
            self._make_session = sessionmaker(self.engine, expire_on_commit=False)
        return self._make_session()

    def get_instance(self) -> Session:
        if self._session is None:
            session = self.make_session()
            try:
                session.connection()
            except DBAPIError as e:
                session.close()
                raise StorageConnectionError(f'Cannot connect to the database: {e.orig}') from e
            self._session = session
        return self._session

    def start(self) -> None:
        try:
            with self.engine.begin() as connection:
                Base.metadata.create_all(connection)
        except DBAPIError as e:
            raise StorageConnectionError(f'Cannot connect to the database: {e.orig}') from e
        logger.info('Database schema is ready')

    def stop(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
        if self._engine is not None:
            self._engine.dispose()
        logger.info('Database connection closed')

    @contextmanager
    def lifespan(self) -> Iterator['ConnectionProvider']:
        self.start()
        try:
            yield self
        finally:
            self.stop()
