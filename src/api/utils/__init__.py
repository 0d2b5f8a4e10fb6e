from .executors import run_conversion
from .uploads import read_uploads

__all__ = ["run_conversion", "read_uploads"]
