import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser

FIELD_MAX_LENGTH = 60

# CREATE TABLE relationships_person (
#     id UUID PRIMARY KEY,
#     username VARCHAR(60) UNIQUE NOT NULL,
#     password VARCHAR(128) NOT NULL,
#     ...auth columns from AbstractUser...
#     display_name VARCHAR(60) NOT NULL,
#     avatar_url VARCHAR(200),
#     is_network_public BOOLEAN NOT NULL
# );

class Person(AbstractUser):
    """
    A human account. Every person is a PERSON actor for connection purposes and
    may additionally act for companies through a Membership.

    Fields:
        id (UUID): Stable identifier used as the actor id.
        username (str): Unique login name, max 60 characters.
        display_name (str): Public name shown next to requests and connections.
        avatar_url (str, optional): Profile picture URL.
        is_network_public (bool): Whether other people may list this person's connections.

    Notes:
        - `password`, `email` and the other auth fields come from AbstractUser.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # overriding 'username' to make the max_length shorter
    username = models.CharField(max_length=FIELD_MAX_LENGTH, unique=True)
    display_name = models.CharField(max_length=FIELD_MAX_LENGTH)

    avatar_url = models.URLField(blank=True)
    is_network_public = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Person"
        verbose_name_plural = "People"

    def __str__(self):
        return self.username
