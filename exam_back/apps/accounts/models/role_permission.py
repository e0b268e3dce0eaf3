from django.db import models


class RolePermission(models.Model):
    """
    Role - Menu 권한 매핑 (역할에 메뉴 접근 허가)
    """
    role = models.ForeignKey(
        "accounts.Role",
        on_delete=models.CASCADE,
        related_name="menu_permissions",
    )
    menu = models.ForeignKey(
        "menus.Menu",
        on_delete=models.CASCADE,
        related_name="role_permissions",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "accounts_role_permissions"
        unique_together = ("role", "menu")

    def __str__(self):
        return f"{self.role_id} - {self.menu_id}"
