"""Members Service schemas package.

Re-exports all schemas so that router files use a single import namespace.

Schema files:
  - schemas/checkin.py : check-in frequency schemas
  - schemas/cohort.py  : cohort and membership schemas
"""

from services.members_service.schemas.checkin import (  # noqa: F401
    CheckInFrequencyConfig,
    CheckInFrequencyUpdate,
    EffectiveFrequencyResponse,
    MemberFrequencyResponse,
    MemberFrequencyUpdate,
    UserFrequencyResponse,
)
from services.members_service.schemas.cohort import (  # noqa: F401
    CohortCreate,
    CohortListResponse,
    CohortResponse,
    MembershipCreate,
    MembershipResponse,
    MembershipStatusUpdate,
)

__all__ = [
    # Check-in
    "CheckInFrequencyConfig",
    "CheckInFrequencyUpdate",
    "EffectiveFrequencyResponse",
    "MemberFrequencyResponse",
    "MemberFrequencyUpdate",
    "UserFrequencyResponse",
    # Cohort
    "CohortCreate",
    "CohortListResponse",
    "CohortResponse",
    "MembershipCreate",
    "MembershipResponse",
    "MembershipStatusUpdate",
]
