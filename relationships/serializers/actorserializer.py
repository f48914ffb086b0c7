from rest_framework import serializers
from relationships.models import Person, Company, ActorKind, actor_kind


class PersonSerializer(serializers.ModelSerializer):
    type = serializers.SerializerMethodField()

    class Meta:
        model = Person
        fields = ["type", "id", "username", "display_name", "avatar_url"]

    def get_type(self, obj):
        return "person"


class CompanySerializer(serializers.ModelSerializer):
    type = serializers.SerializerMethodField()

    class Meta:
        model = Company
        fields = ["type", "id", "name", "avatar_url", "industry"]

    def get_type(self, obj):
        return "company"


def serialize_actor(actor, context=None):
    """Display info for a Person or Company, whichever ``actor`` is."""
    if actor_kind(actor) == ActorKind.PERSON:
        return PersonSerializer(actor, context=context).data
    return CompanySerializer(actor, context=context).data


class NetworkEntrySerializer(serializers.Serializer):
    """One ``(actor, connected_at)`` pair of a network list, flattened."""
    def to_representation(self, instance):
        actor, connected_at = instance
        data = dict(serialize_actor(actor, self.context))
        data['connected_at'] = connected_at.isoformat() if connected_at else None
        return data
