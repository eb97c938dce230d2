"""SQLAlchemy bridge for model descriptors."""

from .base import NAMING_CONVENTION, Base, make_base, metadata  # noqa: F401
from .events import MAPPER_EVENTS, bind_lifecycle_events, run_lifecycle  # noqa: F401
from .table import build_table, declare_model  # noqa: F401
