from django.contrib import admin

from authentication.models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ["email", "username", "is_artist", "is_active", "date_joined"]
    list_filter = ["is_artist", "is_active", "is_staff"]
    search_fields = ["email", "username"]
    readonly_fields = ["id", "date_joined", "updated_at"]
