"""Exceptions raised by the engine and its bundled stores."""


class EngineError(Exception):
    """Base class for engine errors."""


class ConfigError(EngineError):
    """Configuration file could not be parsed or validated."""


class UnknownEntityKind(EngineError):
    def __init__(self, kind):
        super().__init__(f"No notify action configured for entity kind: {kind}")
        self.kind = kind


class FileNotFound(EngineError):
    def __init__(self, file_id):
        super().__init__(f"File not found: {file_id}")
        self.file_id = file_id


class CommentTargetMismatch(EngineError):
    def __init__(self, target: str, expected: str):
        super().__init__(
            f"Comment targets {target!r} but was saved against {expected!r}"
        )
        self.target = target
        self.expected = expected
