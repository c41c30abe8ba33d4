class InvalidCollectionError(ValueError):
    """Raised when a record collection or column set cannot back a table."""

    def __init__(self, message: str, details: dict | None = None):
        self.details = details or {}
        super().__init__(message)
