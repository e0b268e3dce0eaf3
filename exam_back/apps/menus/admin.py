from django.contrib import admin
from .models import Menu, UserMenuOverride


# Admin 등록
@admin.register(Menu)
class MenuAdmin(admin.ModelAdmin):
    list_display = ("code", "title", "path", "parent", "order", "level", "menu_type", "is_active", "is_hidden")
    list_filter = ("menu_type", "is_active", "is_hidden")
    search_fields = ("code", "title", "path")


@admin.register(UserMenuOverride)
class UserMenuOverrideAdmin(admin.ModelAdmin):
    list_display = ("user", "menu", "permission_type", "updated_at")
    list_filter = ("permission_type",)
