from .actorserializer import PersonSerializer, CompanySerializer, NetworkEntrySerializer, serialize_actor
from .connectionrequestserializer import (
    ConnectionRequestSerializer,
    SendConnectionRequestSerializer,
    SendCompanyConnectionRequestSerializer,
    RespondSerializer,
    ConnectionStatusSerializer,
)
from .followserializer import CompanyFollowSerializer
