class PeopleDBError(Exception):
    pass


class ConfigurationError(PeopleDBError):
    pass


class StorageConnectionError(PeopleDBError, ConnectionError):
    pass


class ValidationError(PeopleDBError, ValueError):
    pass


class NotFoundError(PeopleDBError, LookupError):
    pass
