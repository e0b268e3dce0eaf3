from django.db import models

# Role 모델
class Role(models.Model):
    code = models.CharField(max_length=50, unique=True) # SUPER_ADMIN, ADMIN, TEACHER, STUDENT
    name = models.CharField(max_length=50)
    description = models.TextField(blank=True)
    sort_order = models.IntegerField(default=0)
    is_system = models.BooleanField(default=False)  # 시스템 역할은 삭제 불가
    is_active = models.BooleanField(default=True)   # 비활성 역할은 메뉴 권한을 부여하지 않음

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # 참고: Role-Menu 권한 매핑은 RolePermission 모델을 통해 관리됨
    # (apps/accounts/models/role_permission.py 참조)

    class Meta:
        ordering = ["sort_order", "id"]

    def __str__(self):
        return self.name
