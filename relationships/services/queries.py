"""
Read side of the engine: pending lists, current connections and follows.

Who may look at a company's lists is decided at the API boundary
(``IsCompanyAdmin``); these functions only read.
"""
from relationships.models import CompanyFollow, actor_kind
from relationships.services.connections import request_model_for, status_of


def _requests_for(actor):
    return request_model_for(actor_kind(actor)).objects.select_related(
        "requester", "addressee", "acting_person"
    )


def pending_incoming(actor):
    """PENDING requests addressed to ``actor``, newest first."""
    return _requests_for(actor).pending().filter(addressee=actor).order_by("-requested_at")


def pending_outgoing(actor):
    """PENDING requests sent by ``actor``, newest first."""
    return _requests_for(actor).pending().filter(requester=actor).order_by("-requested_at")


def network_of(actor):
    """
    ``(counterpart, connected_at)`` for every ACCEPTED connection of ``actor``,
    most recently connected first. ``connected_at`` is when the request was
    accepted.
    """
    rows = _requests_for(actor).accepted().involving(actor).order_by("-responded_at")
    return [(row.counterpart_of(actor), row.responded_at) for row in rows]


def current_connections(actor):
    """Actors holding an ACCEPTED connection with ``actor``, from either direction."""
    return [counterpart for counterpart, _ in network_of(actor)]


def status_between(first, second):
    return status_of(first, second)


def can_view_network(viewer, person) -> bool:
    """People may hide their connection list from everyone but themselves."""
    if person.is_network_public:
        return True
    return viewer is not None and viewer.pk == person.pk


def followed_companies(person):
    """Follow edges of ``person`` with their companies, most recent first."""
    return CompanyFollow.objects.filter(person=person).select_related("company").order_by("-created_at")


def company_followers(company):
    return CompanyFollow.objects.filter(company=company).select_related("person").order_by("-created_at")


def follower_count(company) -> int:
    return CompanyFollow.objects.filter(company=company).count()
