"""
Person -> company follow edges. No approval and no status: following is
idempotent and unfollowing something you do not follow is a no-op.
"""
import logging
from relationships import errors
from relationships.conf import engine_setting
from relationships.models import CompanyFollow
from relationships.permissions import can_act_for

logger = logging.getLogger(__name__)


def follow(person, company):
    """
    Follow ``company``. Returns ``(edge, created)``.

    People who administer the company are refused with SelfFollow while the
    FORBID_SELF_FOLLOW policy is on.
    """
    if can_act_for(person, company) and engine_setting("FORBID_SELF_FOLLOW"):
        raise errors.SelfFollow()

    # get_or_create absorbs a concurrent insert through the unique constraint
    edge, created = CompanyFollow.objects.get_or_create(person=person, company=company)
    if created:
        logger.info("Person %s followed company %s", person.pk, company.pk)
    return edge, created


def unfollow(person, company) -> bool:
    """Stop following ``company``. Returns whether an edge was removed."""
    deleted, _ = CompanyFollow.objects.filter(person=person, company=company).delete()
    if deleted:
        logger.info("Person %s unfollowed company %s", person.pk, company.pk)
    return bool(deleted)


def is_following(person, company) -> bool:
    return CompanyFollow.objects.filter(person=person, company=company).exists()
