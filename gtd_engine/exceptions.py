class PayloadShapeError(ValueError):
    """Raised when an extraction payload cannot be read as either known shape."""

    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []
