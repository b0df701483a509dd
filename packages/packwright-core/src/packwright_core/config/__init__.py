from .loader import load_config
from .models import (
    BundlerConfig,
    PackwrightConfig,
    WatchConfig,
)

__all__ = [
    "BundlerConfig",
    "PackwrightConfig",
    "WatchConfig",
    "load_config",
]
