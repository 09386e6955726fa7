# compliancetrack/models/__init__.py
from compliancetrack.db.base import Base  # noqa: F401

# order matters due to FKs
from . import user  # noqa: F401
from . import company  # noqa: F401
from . import company_member  # noqa: F401
from . import invitation  # noqa: F401
from . import obligation  # noqa: F401
from . import obligation_comment  # noqa: F401
from . import reminder_config  # noqa: F401
from . import insight_request  # noqa: F401
from . import obligation_deletion  # noqa: F401
