import bleach
from rest_framework import serializers


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class AccessGrantField(serializers.Field):
    """Hospital names as a space separated string or a JSON list.

    Stored back as a single space separated string without duplicates.
    """
    default_error_messages = {
        'invalid': 'Expected a string or a list of hospital names.',
        'empty': 'Please select at least one hospital.',
    }

    def to_internal_value(self, data):
        if isinstance(data, str):
            names = data.split()
        elif isinstance(data, (list, tuple)) and all(isinstance(n, str) for n in data):
            names = [part for n in data for part in n.split()]
        else:
            self.fail('invalid')
        names = list(dict.fromkeys(_clean(n) for n in names if n.strip()))
        if not names:
            self.fail('empty')
        return ' '.join(names)

    def to_representation(self, value):
        return value


class PatientRegisterSerializer(serializers.Serializer):
    patientName = serializers.CharField(max_length=200)
    age = serializers.IntegerField(min_value=0, max_value=150, required=False, allow_null=True)
    gender = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    contactNo = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    address = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    problemDesc = serializers.CharField(min_length=10)
    accessData = AccessGrantField()

    def to_internal_value(self, data):
        # the form posts "" for an untouched age box
        if hasattr(data, 'get') and data.get('age') == '':
            data = data.copy()
            data['age'] = None
        return super().to_internal_value(data)

    def validate_patientName(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Full name is required')
        return v

    def validate_gender(self, v):
        return _clean(v) or None

    def validate_contactNo(self, v):
        return _clean(v) or None

    def validate_address(self, v):
        return _clean(v) or None

    def validate_problemDesc(self, v):
        v = _clean(v)
        if len(v) < 10:
            raise serializers.ValidationError('Please provide a detailed description of your medical condition')
        return v


class PatientLoginSerializer(serializers.Serializer):
    patientNumber = serializers.CharField(required=False, allow_blank=True)
    contactNo = serializers.CharField(required=False, allow_blank=True)
    patientId = serializers.CharField(required=False, allow_blank=True)


class PatientLookupSerializer(serializers.Serializer):
    patientName = serializers.CharField()
    contactNo = serializers.CharField()
