from django.contrib import admin
from .models import AdminAuditLog


@admin.register(AdminAuditLog)
class AdminAuditLogAdmin(admin.ModelAdmin):
    list_display = ('admin_username', 'action', 'target_username', 'timestamp')
    list_filter = ('action',)
    search_fields = ('admin_username', 'target_username')
