from rest_framework import serializers
from relationships.models import CompanyFollow
from .actorserializer import CompanySerializer, PersonSerializer


class CompanyFollowSerializer(serializers.ModelSerializer):
    type        = serializers.SerializerMethodField()
    person      = PersonSerializer(read_only=True)
    company     = CompanySerializer(read_only=True)
    followed_at = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model  = CompanyFollow
        fields = ["type", "id", "person", "company", "followed_at"]

    def get_type(self, obj):
        return "follow"
