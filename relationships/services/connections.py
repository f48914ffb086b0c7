"""
Connection state machine for person-person and company-company requests.

Rows are directional (requester -> addressee) but the situation between two
actors is read symmetrically through ``status_of``. Every mutation checks its
preconditions first and then performs a single conditional write, so a
concurrent caller either sees its own write applied or gets a typed error.

    none --send--> PENDING --accept--> ACCEPTED --remove--> none
    PENDING --decline--> DECLINED
    PENDING --cancel--> none
    BLOCKED (set by staff) suppresses every transition.
"""
import enum
import logging
from django.db import IntegrityError, transaction
from django.utils import timezone
from relationships import errors
from relationships.conf import engine_setting
from relationships.models import (
    ActorKind,
    ConnectionStatus,
    PersonConnectionRequest,
    CompanyConnectionRequest,
    actor_kind,
)
from relationships.permissions import can_act_for

logger = logging.getLogger(__name__)

REQUEST_MODELS = {
    ActorKind.PERSON: PersonConnectionRequest,
    ActorKind.ORGANIZATION: CompanyConnectionRequest,
}

ACTIVE_STATUSES = (ConnectionStatus.PENDING, ConnectionStatus.ACCEPTED)


class ConnectionState(str, enum.Enum):
    """The situation between two actors as seen by one of them."""
    NONE = "NONE"
    PENDING_SENT = "PENDING_SENT"
    PENDING_RECEIVED = "PENDING_RECEIVED"
    ACCEPTED = "ACCEPTED"
    DECLINED_SENT = "DECLINED_SENT"
    DECLINED_RECEIVED = "DECLINED_RECEIVED"
    BLOCKED = "BLOCKED"


class Decision(str, enum.Enum):
    ACCEPT = "ACCEPT"
    DECLINE = "DECLINE"

    @classmethod
    def parse(cls, value):
        """Accept 'accept', 'ACCEPTED', 'decline', 'DECLINED' and enum members."""
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().upper()
        aliases = {
            "ACCEPT": cls.ACCEPT,
            "ACCEPTED": cls.ACCEPT,
            "DECLINE": cls.DECLINE,
            "DECLINED": cls.DECLINE,
        }
        if normalized not in aliases:
            raise ValueError(f"Unknown decision: {value!r}")
        return aliases[normalized]


# stored status -> (state seen by requester, state seen by addressee)
_STATES_BY_STATUS = {
    ConnectionStatus.PENDING: (ConnectionState.PENDING_SENT, ConnectionState.PENDING_RECEIVED),
    ConnectionStatus.ACCEPTED: (ConnectionState.ACCEPTED, ConnectionState.ACCEPTED),
    ConnectionStatus.DECLINED: (ConnectionState.DECLINED_SENT, ConnectionState.DECLINED_RECEIVED),
    ConnectionStatus.BLOCKED: (ConnectionState.BLOCKED, ConnectionState.BLOCKED),
}


def request_model_for(kind):
    return REQUEST_MODELS[ActorKind(kind)]


def _pair_kind(first, second):
    kind = actor_kind(first)
    if actor_kind(second) != kind:
        raise ValueError("Connections are only possible between actors of the same kind.")
    return kind


def may_act_as(person, actor) -> bool:
    """Whether ``person`` may act for ``actor``: itself, or a company it administers."""
    if person is None:
        return False
    if actor_kind(actor) == ActorKind.PERSON:
        return person.pk == actor.pk
    return can_act_for(person, actor)


def get_request(kind, request_id):
    """Load a connection request by id or raise NotFound."""
    model = request_model_for(kind)
    request = (
        model.objects.select_related("requester", "addressee", "acting_person")
        .filter(pk=request_id)
        .first()
    )
    if request is None:
        raise errors.NotFound("Connection request not found.")
    return request


def governing_request(first, second):
    """
    The row that decides the situation between two actors.

    A live row (pending, accepted or blocked) wins; otherwise the most recent
    declined request, if any.
    """
    model = request_model_for(_pair_kind(first, second))
    pair = model.objects.for_pair(first, second)
    live = pair.live().first()
    if live is not None:
        return live
    return pair.filter(status=ConnectionStatus.DECLINED).order_by("-responded_at", "-requested_at").first()


def status_of(querying_actor, other_actor) -> ConnectionState:
    _pair_kind(querying_actor, other_actor)
    if querying_actor.pk == other_actor.pk:
        return ConnectionState.NONE
    request = governing_request(querying_actor, other_actor)
    if request is None:
        return ConnectionState.NONE
    as_requester, as_addressee = _STATES_BY_STATUS[request.status]
    return as_requester if request.requester_id == querying_actor.pk else as_addressee


def _active_request_exists(pair):
    return pair.filter(status__in=ACTIVE_STATUSES).exists()


def _raise_for_lost_write(model, request_id, fallback):
    """A conditional write touched no rows: report why."""
    current = model.objects.filter(pk=request_id).values_list("status", flat=True).first()
    if current is None:
        raise errors.NotFound("Connection request not found.")
    if current == ConnectionStatus.BLOCKED:
        raise errors.Blocked()
    raise fallback


def send_request(acting_person, requester, addressee, notes=""):
    """
    Create a PENDING request from ``requester`` to ``addressee``.

    ``acting_person`` is the logged-in human; for company requests they must
    administer ``requester``.
    """
    kind = _pair_kind(requester, addressee)
    if requester.pk == addressee.pk:
        raise errors.SelfReference()
    if not may_act_as(acting_person, requester):
        logger.warning(
            "Person %s may not send connection requests for %s %s",
            getattr(acting_person, "pk", None), kind, requester.pk,
        )
        raise errors.Unauthorized()

    model = request_model_for(kind)
    pair = model.objects.for_pair(requester, addressee)
    if pair.filter(status=ConnectionStatus.BLOCKED).exists():
        raise errors.Blocked()
    if _active_request_exists(pair):
        raise errors.AlreadyRequested()
    if not engine_setting("ALLOW_REQUEST_AFTER_DECLINE") and pair.filter(status=ConnectionStatus.DECLINED).exists():
        raise errors.AlreadyRequested("A previous request between these accounts was declined.")

    try:
        with transaction.atomic():
            request = model.objects.create(
                requester=requester,
                addressee=addressee,
                acting_person=acting_person,
                notes=notes or "",
            )
    except IntegrityError:
        # The pair constraint caught a concurrent send or block. The winning
        # row may already be cancelled again; the caller still lost the race.
        live = pair.live().first()
        logger.info(
            "Concurrent %s connection request %s -> %s rejected",
            kind, requester.pk, addressee.pk,
        )
        if live is not None and live.status == ConnectionStatus.BLOCKED:
            raise errors.Blocked()
        raise errors.AlreadyRequested()

    logger.info(
        "%s connection request %s sent %s -> %s by person %s",
        kind, request.pk, requester.pk, addressee.pk, acting_person.pk,
    )
    return request


def respond_to_request(acting_person, request, decision):
    """Accept or decline a PENDING request on behalf of its addressee."""
    decision = Decision.parse(decision)
    if acting_person is None or request.acting_person_id == acting_person.pk:
        raise errors.Unauthorized("You cannot respond to your own request.")
    if not may_act_as(acting_person, request.addressee):
        logger.warning(
            "Person %s may not respond to connection request %s",
            acting_person.pk, request.pk,
        )
        raise errors.Unauthorized()
    if request.status == ConnectionStatus.BLOCKED:
        raise errors.Blocked()
    if request.status != ConnectionStatus.PENDING:
        raise errors.AlreadyResolved()

    new_status = ConnectionStatus.ACCEPTED if decision == Decision.ACCEPT else ConnectionStatus.DECLINED
    now = timezone.now()
    model = type(request)
    with transaction.atomic():
        updated = model.objects.filter(pk=request.pk, status=ConnectionStatus.PENDING).update(
            status=new_status,
            responded_at=now,
            responded_by=acting_person,
        )
    if not updated:
        logger.info("Response to connection request %s lost to a concurrent change", request.pk)
        _raise_for_lost_write(model, request.pk, errors.AlreadyResolved())

    request.status = new_status
    request.responded_at = now
    request.responded_by = acting_person
    logger.info(
        "%s connection request %s %s by person %s",
        request.kind, request.pk, new_status.lower(), acting_person.pk,
    )
    return request


def cancel_request(acting_person, request):
    """Withdraw a PENDING request. Accepted connections go through remove_connection."""
    if not may_act_as(acting_person, request.requester):
        raise errors.Unauthorized("Only the sending side can cancel a request.")
    if request.status == ConnectionStatus.BLOCKED:
        raise errors.Blocked()
    if request.status != ConnectionStatus.PENDING:
        raise errors.NotCancelable()

    model = type(request)
    with transaction.atomic():
        deleted, _ = model.objects.filter(pk=request.pk, status=ConnectionStatus.PENDING).delete()
    if not deleted:
        _raise_for_lost_write(model, request.pk, errors.NotCancelable())

    logger.info(
        "%s connection request %s cancelled by person %s",
        request.kind, request.pk, acting_person.pk,
    )


def remove_connection(acting_person, actor_a, actor_b):
    """Tear down an ACCEPTED connection. Either side alone may do this."""
    kind = _pair_kind(actor_a, actor_b)
    if actor_a.pk == actor_b.pk:
        raise errors.SelfReference()
    if not (may_act_as(acting_person, actor_a) or may_act_as(acting_person, actor_b)):
        raise errors.Unauthorized()

    model = request_model_for(kind)
    pair = model.objects.for_pair(actor_a, actor_b)
    if pair.filter(status=ConnectionStatus.BLOCKED).exists():
        raise errors.Blocked()
    connection = pair.accepted().first()
    if connection is None:
        raise errors.NotFound("No connection exists between these accounts.")

    with transaction.atomic():
        deleted, _ = model.objects.filter(pk=connection.pk, status=ConnectionStatus.ACCEPTED).delete()
    if not deleted:
        raise errors.NotFound("No connection exists between these accounts.")

    logger.info(
        "%s connection %s removed (%s <-> %s) by person %s",
        kind, connection.pk, actor_a.pk, actor_b.pk, acting_person.pk,
    )
