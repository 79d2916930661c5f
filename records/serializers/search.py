from rest_framework import serializers

QUERY_REQUIRED = 'Search query is required'


class HospitalSearchSerializer(serializers.Serializer):
    """Only the query is read; the hospital always comes from the session."""
    query = serializers.CharField(
        trim_whitespace=False,
        error_messages={'required': QUERY_REQUIRED, 'blank': QUERY_REQUIRED, 'null': QUERY_REQUIRED},
    )
