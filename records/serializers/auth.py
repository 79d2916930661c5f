from rest_framework import serializers


class HospitalLoginSerializer(serializers.Serializer):
    """Credentials only; any identity fields sent alongside are ignored."""
    username = serializers.CharField(max_length=100, error_messages={'blank': 'Username is required'})
    # passwords are compared byte for byte, so no trimming
    password = serializers.CharField(trim_whitespace=False, error_messages={'blank': 'Password is required'})

    def validate_username(self, v):
        return v.strip()
