from dmi_sprites.config import DmiConfig, load_dmi_config
from dmi_sprites.directions import DIR_NAMES, DIR_ORDER, Dirs
from dmi_sprites.document import DmiDocument
from dmi_sprites.errors import ConfigError, DmiError, ExtractionError, FormatError, SizeMismatchError
from dmi_sprites.state import AnimationState

__all__ = [
    "AnimationState",
    "ConfigError",
    "DIR_NAMES",
    "DIR_ORDER",
    "Dirs",
    "DmiConfig",
    "DmiDocument",
    "DmiError",
    "ExtractionError",
    "FormatError",
    "SizeMismatchError",
    "load_dmi_config",
]
