from typing import Protocol


class GenerationError(RuntimeError):
    def __init__(self, message: str, *, code: str = "generation_failed", status_code: int | None = None):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class AIClient(Protocol):
    def generate(self, prompt: str) -> str: ...
