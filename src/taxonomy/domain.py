"""Domain initialization and configuration."""

from protean.domain import Domain

from taxonomy.config import get_settings
from taxonomy.utils.logging import configure_logging, get_logger

settings = get_settings()

# Configure logging for the application
configure_logging(level=settings.log_level, log_dir=settings.log_dir, log_file_prefix="taxonomy")

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
taxonomy = Domain(name="taxonomy")
