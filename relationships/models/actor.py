from django.db import models
from .company import Company
from .person import Person


class ActorKind(models.TextChoices):
    PERSON = "PERSON", "Person"
    ORGANIZATION = "ORGANIZATION", "Organization"


def actor_kind(actor):
    """Return the ActorKind of a Person or Company instance."""
    if isinstance(actor, Person):
        return ActorKind.PERSON
    if isinstance(actor, Company):
        return ActorKind.ORGANIZATION
    raise TypeError(f"{type(actor).__name__} is not an actor")
