from django.contrib import admin
from .models import UserProfile, FriendRequest


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'verification_status', 'email_verified_at', 'created_at')
    list_filter = ('verification_status',)
    search_fields = ('user__username', 'user__email')


@admin.register(FriendRequest)
class FriendRequestAdmin(admin.ModelAdmin):
    list_display = ('sender', 'receiver', 'status', 'created_at')
    list_filter = ('status',)
