from django.contrib import admin
from .models import IdentityDocument, VerificationCode


@admin.register(VerificationCode)
class VerificationCodeAdmin(admin.ModelAdmin):
    list_display = ('user', 'purpose', 'created_at', 'expires_at', 'attempt_count')
    list_filter = ('purpose',)
    search_fields = ('user__username', 'user__email')
    exclude = ('code_hash',)


@admin.register(IdentityDocument)
class IdentityDocumentAdmin(admin.ModelAdmin):
    list_display = ('user', 'status', 'submitted_at', 'reviewed_by')
    list_filter = ('status',)
    search_fields = ('user__username',)
