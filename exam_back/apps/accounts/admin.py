from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, Role, UserRole, RolePermission, RolePermissionHistory


class UserRoleInline(admin.TabularInline):
    model = UserRole
    extra = 0


# admin 페이지 연결
@admin.register(User)
class UserAdmin(BaseUserAdmin):
    # 목록에 표시할 필드
    list_display = ("login_id", "name", "email", "is_active", "is_superuser", "last_login")
    search_fields = ("login_id", "name", "email")
    ordering = ("login_id",)
    inlines = [UserRoleInline]

    # 상세 화면에서 보여줄 필드 그룹
    fieldsets = (
        (None, {"fields": ("login_id", "password")}),
        ("개인정보", {"fields": ("name", "email")}),
        ("권한", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("기록", {"fields": ("last_login", "created_at", "updated_at")}),
    )
    readonly_fields = ("created_at", "updated_at")

    # 사용자 추가 화면에서 보여줄 필드
    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("login_id", "name", "email", "password1", "password2", "is_active", "is_staff", "is_superuser"),
        }),
    )


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "sort_order", "is_system", "is_active")
    list_filter = ("is_system", "is_active")
    search_fields = ("code", "name")


@admin.register(RolePermission)
class RolePermissionAdmin(admin.ModelAdmin):
    list_display = ("role", "menu", "created_at")
    list_filter = ("role",)


@admin.register(RolePermissionHistory)
class RolePermissionHistoryAdmin(admin.ModelAdmin):
    list_display = ("role", "menu", "action", "changed_by", "changed_at", "reason")
    list_filter = ("action", "role")
