# datasources/exceptions.py

class DataSourceError(Exception):
    pass


class DataSourceUnavailable(DataSourceError):
    pass


class InvalidQuery(DataSourceError):
    pass


class WriteFailed(DataSourceError):
    pass
