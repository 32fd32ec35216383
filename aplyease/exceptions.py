class AplyEaseError(Exception):
    """Base class for domain errors raised by aplyease services."""


class InvalidStatusError(AplyEaseError, ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid application status: {value!r}")
