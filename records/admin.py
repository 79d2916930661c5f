"""
Django admin registrations for the records models.

Superusers can inspect patients, hospitals and the access/reward trail
via ``/admin/``.  Access logs, reward grants and audit events are
append-only, so their admin pages are read-only.
"""

from django import forms
from django.contrib import admin

from .models import AccessLog, AuditEvent, Hospital, Patient, RewardGrant


class HospitalAdminForm(forms.ModelForm):
    password = forms.CharField(required=False, widget=forms.PasswordInput,
                               help_text="Leave empty to keep the current password.")

    class Meta:
        model = Hospital
        fields = ('name', 'username')

    def clean(self):
        data = super().clean()
        if self.instance._state.adding and not data.get('password'):
            raise forms.ValidationError("A new hospital needs a password.")
        if any(c.isspace() for c in data.get('name') or ''):
            raise forms.ValidationError("Hospital names cannot contain spaces.")
        return data

    def save(self, commit=True):
        hospital = super().save(commit=False)
        if self.cleaned_data.get('password'):
            hospital.set_password(self.cleaned_data['password'])
        if commit:
            hospital.save()
        return hospital


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    form = HospitalAdminForm
    list_display = ('name', 'username', 'created_at')
    search_fields = ('name', 'username')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('patient_number', 'patient_name', 'age', 'gender', 'access_data', 'revenue', 'created_at')
    search_fields = ('patient_number', 'patient_name', 'contact_no', 'problem_desc')
    readonly_fields = ('patient_number', 'revenue', 'integrity_digest', 'profile_date', 'created_at', 'updated_at')

    def has_add_permission(self, request):
        # patients register through the API so they get a number and digest
        return False


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(AccessLog)
class AccessLogAdmin(ReadOnlyAdmin):
    list_display = ('access_time', 'hospital', 'patient', 'allowed', 'reward_given', 'search_query')
    list_filter = ('allowed', 'reward_given', 'hospital')
    search_fields = ('patient__patient_name', 'hospital__name', 'search_query')


@admin.register(RewardGrant)
class RewardGrantAdmin(ReadOnlyAdmin):
    list_display = ('day', 'hospital', 'patient', 'amount', 'granted_at')
    list_filter = ('day', 'hospital')


@admin.register(AuditEvent)
class AuditEventAdmin(ReadOnlyAdmin):
    list_display = ('created_at', 'action', 'hospital', 'object_type', 'object_id')
    list_filter = ('action',)
