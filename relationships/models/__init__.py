from .person import Person, FIELD_MAX_LENGTH
from .company import Company, Membership, MembershipRole, MembershipStatus
from .actor import ActorKind, actor_kind
from .connectionrequest import (
    ConnectionStatus,
    LIVE_STATUSES,
    make_pair_key,
    BaseConnectionRequest,
    PersonConnectionRequest,
    CompanyConnectionRequest,
)
from .follow import CompanyFollow
