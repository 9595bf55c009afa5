__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'pareg'
__author__ = 'The pareg authors'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .faults import *
from .cursor import *
from .readers import *
from .checks import *
from .formats import *
from .parsers import *
from .navigator import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the cursor
__all__ += cursor.__all__  # type: ignore[attr-defined]
# Load the exposed API of the readers
__all__ += readers.__all__  # type: ignore[attr-defined]
# Load the exposed API of the checks
__all__ += checks.__all__  # type: ignore[attr-defined]
# Load the exposed API of the formats
__all__ += formats.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parsers
__all__ += parsers.__all__  # type: ignore[attr-defined]
# Load the exposed API of the navigator
__all__ += navigator.__all__  # type: ignore[attr-defined]
