class ScanFailed(Exception):
    """A scan could not start because of its root path."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path: str = path


class NotFound(ScanFailed):
    def __init__(self, path: str) -> None:
        super().__init__(path, "Directory does not exist")


class NotADirectory(ScanFailed):
    def __init__(self, path: str) -> None:
        super().__init__(path, "Path is not a directory")


class PermissionDenied(ScanFailed):
    def __init__(self, path: str) -> None:
        super().__init__(path, "Permission denied")


def root_failure(path: str, exc: OSError) -> ScanFailed:
    """Map an OSError raised on a root path to the matching ScanFailed."""
    if isinstance(exc, FileNotFoundError):
        return NotFound(path)
    if isinstance(exc, NotADirectoryError):
        return NotADirectory(path)
    if isinstance(exc, PermissionError):
        return PermissionDenied(path)
    return ScanFailed(path, exc.strerror or exc.__class__.__name__)
