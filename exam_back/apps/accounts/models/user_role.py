from django.db import models

# UserRole(사용자별 역할) 모델
class UserRole(models.Model):
    user = models.ForeignKey("accounts.User", on_delete=models.CASCADE)
    role = models.ForeignKey("accounts.Role", on_delete=models.CASCADE)
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("user", "role")
