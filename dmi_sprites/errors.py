class DmiError(Exception):
    """Base class for every error raised while reading or writing DMI files."""


class FormatError(DmiError, ValueError):
    """The metadata grammar is malformed."""


class ExtractionError(DmiError):
    """Frames could not be cut out of the packed sprite grid."""


class SizeMismatchError(ExtractionError):
    """A cropped grid cell does not match the document's frame size."""


class ConfigError(DmiError):
    pass
