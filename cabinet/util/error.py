"""Utility layer errors."""


class ConfigurationError(Exception):
    """Settings are unusable for the current environment.

    Attributes:
        setting_names: Environment variable names of the offending settings
    """

    def __init__(self, message: str, setting_names: list[str] | None = None):
        self.setting_names = setting_names or []
        super().__init__(message)
