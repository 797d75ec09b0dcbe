class DataFileError(RuntimeError):
    """A catalog or translation document is missing, unparsable, or malformed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
