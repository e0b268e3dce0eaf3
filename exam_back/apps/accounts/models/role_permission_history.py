from django.conf import settings
from django.db import models


class RolePermissionHistory(models.Model):
    ACTION_CHOICES = (
        ("ADD", "권한 추가"),
        ("REMOVE", "권한 제거"),
    )

    role = models.ForeignKey("accounts.Role", on_delete=models.CASCADE)
    menu = models.ForeignKey("menus.Menu", on_delete=models.CASCADE)

    action = models.CharField(max_length=10, choices=ACTION_CHOICES)

    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="permission_changes"
    )

    changed_at = models.DateTimeField(auto_now_add=True)
    reason = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["-changed_at", "-id"]
