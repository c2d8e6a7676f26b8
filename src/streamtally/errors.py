class StreamTallyError(Exception):
    """Base error for failures the CLI reports to the user."""


class DatasetNotFoundError(StreamTallyError):
    def __init__(self, path, hint: str = ""):
        self.path = path
        message = f"{path} not found."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


class DatasetFormatError(StreamTallyError):
    pass
