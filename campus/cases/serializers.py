from rest_framework import serializers

from campus.schools.models import School
from .models import Case, CasePriority, CaseStatus, ViolenceType, incident_time_validator


class EvidenceFileSerializer(serializers.Serializer):
    """Metadata of a file already uploaded to external storage"""
    name = serializers.CharField(max_length=255)
    url = serializers.URLField(max_length=1000)
    type = serializers.CharField(max_length=100)
    size = serializers.IntegerField(min_value=0)
    uploaded_at = serializers.DateTimeField()


class CaseSerializer(serializers.ModelSerializer):
    """Read serializer for cases"""
    school_name = serializers.CharField(source='school.name', read_only=True)
    school_code = serializers.CharField(source='school.code', read_only=True)
    created_by_name = serializers.CharField(source='created_by.name', read_only=True, default=None)

    class Meta:
        model = Case
        fields = [
            'id', 'case_number', 'incident_date', 'incident_time', 'violence_type',
            'description', 'location', 'custom_location',
            'victim_is_anonymous', 'victim_name', 'victim_age', 'victim_grade',
            'aggressor_name', 'aggressor_description', 'relationship_to_victim',
            'witnesses', 'evidence_files', 'status', 'priority',
            'school', 'school_name', 'school_code',
            'created_by', 'created_by_name', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class CaseWriteSerializer(serializers.ModelSerializer):
    """
    Input validation for case create and update.
    ``school`` is only honoured for administrators; see CaseService.
    """
    incident_time = serializers.CharField(max_length=5, validators=[incident_time_validator])
    description = serializers.CharField(min_length=10)
    evidence_files = EvidenceFileSerializer(many=True, required=False)
    school = serializers.PrimaryKeyRelatedField(
        queryset=School.objects.active(),
        required=False,
        allow_null=True
    )

    class Meta:
        model = Case
        fields = [
            'incident_date', 'incident_time', 'violence_type', 'description',
            'location', 'custom_location',
            'victim_is_anonymous', 'victim_name', 'victim_age', 'victim_grade',
            'aggressor_name', 'aggressor_description', 'relationship_to_victim',
            'witnesses', 'evidence_files', 'status', 'priority', 'school',
        ]
        extra_kwargs = {
            'victim_age': {'min_value': 1},
        }

    def validate(self, attrs):
        if self.instance is not None and 'school' in attrs:
            raise serializers.ValidationError({'school': 'A case cannot be moved to another school'})
        return attrs


class CaseFilterSerializer(serializers.Serializer):
    """Query parameters accepted by the case listing."""
    school_id = serializers.IntegerField(required=False)
    search = serializers.CharField(required=False)
    violence_type = serializers.ChoiceField(choices=ViolenceType.choices, required=False)
    status = serializers.ChoiceField(choices=CaseStatus.choices, required=False)
    priority = serializers.ChoiceField(choices=CasePriority.choices, required=False)
