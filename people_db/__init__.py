from .collection import Condition, PersonCollection
from .config import Base, ConnectionProvider, DBSettings, connection_url, load_settings
from .errors import ConfigurationError, NotFoundError, PeopleDBError, StorageConnectionError, ValidationError
from .functions import data_validation, get_age, get_sex_as_string
from .persons import Persons
from .record import PersonRecord, PersonSnapshot
from .sex import Sex

__all__ = [
    'Base',
    'ConnectionProvider',
    'DBSettings',
    'connection_url',
    'load_settings',
    'Persons',
    'PersonRecord',
    'PersonSnapshot',
    'PersonCollection',
    'Condition',
    'Sex',
    # Functions
    'data_validation',
    'get_age',
    'get_sex_as_string',
    # Errors
    'PeopleDBError',
    'ConfigurationError',
    'StorageConnectionError',
    'ValidationError',
    'NotFoundError',
]
