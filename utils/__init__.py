from .currency import format_currency  # noqa: F401
from .env import load_project_dotenv  # noqa: F401
from .logger import get_logger  # noqa: F401
