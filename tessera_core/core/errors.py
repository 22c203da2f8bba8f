from __future__ import annotations


class ColorParseError(ValueError):
    """Raised when a hex colour string cannot be decoded."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"cannot parse color `{text}`: {reason}")
        self.text = text
        self.reason = reason


class InvalidHexDigitError(ColorParseError):
    pass


class TruncatedHexError(ColorParseError):
    pass


class ConfigError(ValueError):
    pass
