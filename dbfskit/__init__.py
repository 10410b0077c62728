__version__ = "0.1.0"

from .errors import *  # noqa: F403, I001
from .session import SessionConfig, configure, ensure_configured  # noqa: F401
from .client import Client, get_client  # noqa: F401
from . import config  # noqa: F401
from . import dbfs  # noqa: F401
from . import encoding  # noqa: F401
from . import models  # noqa: F401
from . import workspace  # noqa: F401
