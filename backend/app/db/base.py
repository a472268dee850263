from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.user import User  # noqa: F401
from backend.app.models.student import Student  # noqa: F401
from backend.app.models.interaction import Interaction  # noqa: F401
from backend.app.models.system_settings import SystemSettings  # noqa: F401
