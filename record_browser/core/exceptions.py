

class RecordBrowserError(Exception):
    """Base exception for all record_browser errors"""
    pass

class ConfigError(RecordBrowserError):
    """Invalid or inconsistent global.json or collection config"""
    pass

class CollectionSchemaError(RecordBrowserError):
    """
    Record collection doesn't match what Collection expects
    missing id field, duplicate ids, etc
    """
    pass

class DataSourceError(RecordBrowserError):
    """A data source failed to produce a page of records"""
    pass
