from rest_framework import serializers
from relationships.services import Decision
from .actorserializer import serialize_actor


class ConnectionRequestSerializer(serializers.Serializer):
    """
    Read-only representation of a person or company connection request.

    When the serializer context carries ``actor`` (the person or company whose
    list is being shown) the output also has a ``counterpart`` entry with the
    other side's display info, so list views need no second lookup.
    """
    def to_representation(self, instance):
        data = {
            'type':         'connection_request',
            'id':           str(instance.id),
            'kind':         str(instance.kind),
            'status':       str(instance.status),
            'requester':    serialize_actor(instance.requester, self.context),
            'addressee':    serialize_actor(instance.addressee, self.context),
            'acting_person_id': str(instance.acting_person_id),
            'notes':        instance.notes,
            'requested_at': instance.requested_at.isoformat(),
            'responded_at': instance.responded_at.isoformat() if instance.responded_at else None,
        }
        actor = self.context.get('actor')
        if actor is not None:
            data['counterpart'] = serialize_actor(instance.counterpart_of(actor), self.context)
        return data


class SendConnectionRequestSerializer(serializers.Serializer):
    addressee_person_id = serializers.UUIDField()
    note = serializers.CharField(required=False, allow_blank=True, default="", max_length=1000)


class SendCompanyConnectionRequestSerializer(serializers.Serializer):
    target_company_id = serializers.UUIDField()
    note = serializers.CharField(required=False, allow_blank=True, default="", max_length=1000)


class RespondSerializer(serializers.Serializer):
    decision = serializers.CharField()

    def validate_decision(self, value):
        try:
            return Decision.parse(value)
        except ValueError:
            raise serializers.ValidationError("Decision must be 'accept' or 'decline'.")


class ConnectionStatusSerializer(serializers.Serializer):
    """{"status": "PENDING_SENT"} for a ConnectionState."""
    def to_representation(self, instance):
        return {'status': instance.value}
