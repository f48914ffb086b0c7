import uuid
from django.db import models
from django.db.models import Q, F
from django.conf import settings
from django.utils import timezone
from .actor import ActorKind
from .company import Company


class ConnectionStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    ACCEPTED = "ACCEPTED", "Accepted"
    DECLINED = "DECLINED", "Declined"
    BLOCKED = "BLOCKED", "Blocked"


# At most one row per pair may be in one of these states.
LIVE_STATUSES = (ConnectionStatus.PENDING, ConnectionStatus.ACCEPTED, ConnectionStatus.BLOCKED)


def make_pair_key(first_id, second_id):
    """Order-independent key for an unordered actor pair."""
    low, high = sorted((str(first_id), str(second_id)))
    return f"{low}:{high}"


class ConnectionRequestQuerySet(models.QuerySet):
    def for_pair(self, first, second):
        return self.filter(pair_key=make_pair_key(first.pk, second.pk))

    def involving(self, actor):
        return self.filter(Q(requester=actor) | Q(addressee=actor))

    def pending(self):
        return self.filter(status=ConnectionStatus.PENDING)

    def accepted(self):
        return self.filter(status=ConnectionStatus.ACCEPTED)

    def live(self):
        return self.filter(status__in=LIVE_STATUSES)


class BaseConnectionRequest(models.Model):
    """
    A directional connection proposal between two actors of the same kind.

    The requester and addressee are distinguishable while the request is
    pending or declined; once accepted the connection is symmetric.

    Fields:
        - requester / addressee: defined on the concrete subclasses.
        - acting_person: The human who sent the request (equal to the requester
          for person-to-person requests, the company admin otherwise).
        - responded_by: The human who accepted or declined it.
        - status: PENDING, ACCEPTED, DECLINED or BLOCKED.
        - requested_at / responded_at: Timestamps of the two lifecycle steps.
        - notes: Optional message from the requester.
        - pair_key: Canonical unordered pair, filled in on save.

    Notes:
        - The conditional unique constraint on pair_key is what keeps two
          concurrent sends from both creating a live row.
        - Declined rows stay as history and are not covered by the constraint.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    acting_person = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="+",
        on_delete=models.CASCADE,
    )
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="+",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )

    status = models.CharField(
        max_length=10,
        choices=ConnectionStatus.choices,
        default=ConnectionStatus.PENDING,
        db_index=True,
    )
    requested_at = models.DateTimeField(default=timezone.now)
    responded_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    pair_key = models.CharField(max_length=80, editable=False, db_index=True)

    objects = ConnectionRequestQuerySet.as_manager()

    kind = None

    class Meta:
        abstract = True
        ordering = ["-requested_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["pair_key"],
                condition=Q(status__in=LIVE_STATUSES),
                name="%(class)s_one_live_per_pair",
            ),
            models.CheckConstraint(
                condition=~Q(requester=F("addressee")),
                name="%(class)s_not_self",
            ),
        ]

    def __str__(self):
        return f"{self.requester} -> {self.addressee} ({self.status})"

    def save(self, *args, **kwargs):
        self.pair_key = make_pair_key(self.requester_id, self.addressee_id)
        super().save(*args, **kwargs)

    def counterpart_of(self, actor):
        """Return the other side of this request as seen from ``actor``."""
        if self.requester_id == actor.pk:
            return self.addressee
        return self.requester


class PersonConnectionRequest(BaseConnectionRequest):
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="sent_connection_requests",
        on_delete=models.CASCADE,
        db_index=True,
    )
    addressee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="received_connection_requests",
        on_delete=models.CASCADE,
        db_index=True,
    )

    kind = ActorKind.PERSON

    class Meta(BaseConnectionRequest.Meta):
        verbose_name = "Person connection request"


class CompanyConnectionRequest(BaseConnectionRequest):
    requester = models.ForeignKey(
        Company,
        related_name="sent_connection_requests",
        on_delete=models.CASCADE,
        db_index=True,
    )
    addressee = models.ForeignKey(
        Company,
        related_name="received_connection_requests",
        on_delete=models.CASCADE,
        db_index=True,
    )

    kind = ActorKind.ORGANIZATION

    class Meta(BaseConnectionRequest.Meta):
        verbose_name = "Company connection request"
