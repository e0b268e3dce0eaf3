from django.db import models
from django.conf import settings

# Menu 모델 설계(메뉴 트리 + 사용자별 예외 권한)

# 메뉴 기본 정보 (path, icon, parent-child 구조)
class Menu(models.Model):
    class MenuType(models.TextChoices):
        MENU = "menu", "메뉴 그룹"
        PAGE = "page", "페이지"
        BUTTON = "button", "버튼 권한"
        LINK = "link", "외부 링크"
        IFRAME = "iframe", "iframe"
        DIR = "dir", "디렉터리"

    id = models.BigAutoField(primary_key=True)  # PK는 숫자형
    code = models.CharField(max_length=100, unique=True)  # 'dashboard', 'exam-list' 등 내부 키
    title = models.CharField(max_length=100)
    path = models.CharField(max_length=200, blank=True, null=True)
    component = models.CharField(max_length=100, blank=True, null=True)  # 프론트 컴포넌트 레지스트리 key
    icon = models.CharField(max_length=50, blank=True, null=True)
    parent = models.ForeignKey("self", related_name="children", on_delete=models.CASCADE, blank=True, null=True)
    order = models.IntegerField(default=0)  # 형제 메뉴 간 정렬 순서
    level = models.PositiveSmallIntegerField(default=1)
    menu_type = models.CharField(max_length=20, choices=MenuType.choices, default=MenuType.MENU)
    is_hidden = models.BooleanField(default=False)  # 사이드바 표시 여부 (라우팅에는 포함)
    is_active = models.BooleanField(default=True)   # False = 비활성 메뉴 (권한 조회에서 제외)
    is_system = models.BooleanField(default=False)
    permission_code = models.CharField(max_length=100, blank=True, null=True)  # 'exam:list' 등
    redirect = models.CharField(max_length=200, blank=True, null=True)
    meta = models.JSONField(blank=True, null=True)
    description = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return self.code


# 사용자별 메뉴 예외 권한 (역할 권한보다 우선)
class UserMenuOverride(models.Model):
    class PermissionType(models.TextChoices):
        GRANT = "grant", "허용"
        DENY = "deny", "거부"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="menu_overrides",
    )
    menu = models.ForeignKey(Menu, on_delete=models.CASCADE, related_name="user_overrides")
    permission_type = models.CharField(max_length=10, choices=PermissionType.choices)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "menus_user_menu_override"
        unique_together = ("user", "menu")

    def __str__(self):
        return f"{self.user_id} - {self.menu_id}: {self.permission_type}"
