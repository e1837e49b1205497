class InvalidPropertyError(ValueError):
    """
    Input that cannot be valued at all (non-positive covered area).
    Everything else that is missing degrades to a neutral factor instead.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field
