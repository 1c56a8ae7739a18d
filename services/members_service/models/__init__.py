"""Members Service models package.

Re-exports all models and enums so that:
  - ``from services.members_service.models import User`` works
  - Alembic env.py sees every table on import

IMPORTANT: Every model class AND enum must be listed here.
"""

from services.members_service.models.cohort import (  # noqa: F401
    Cohort,
    CohortMembership,
)
from services.members_service.models.enums import (  # noqa: F401
    CohortStatus,
    FrequencySource,
    MembershipStatus,
)
from services.members_service.models.user import (  # noqa: F401
    CHECK_IN_FREQUENCY_MAX_DAYS,
    CHECK_IN_FREQUENCY_MIN_DAYS,
    User,
)

__all__ = [
    # Enums
    "CohortStatus",
    "FrequencySource",
    "MembershipStatus",
    # Models
    "Cohort",
    "CohortMembership",
    "User",
    # Constants
    "CHECK_IN_FREQUENCY_MAX_DAYS",
    "CHECK_IN_FREQUENCY_MIN_DAYS",
]
