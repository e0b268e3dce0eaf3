# Generated manually - Menu / UserMenuOverride

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Menu",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=100, unique=True)),
                ("title", models.CharField(max_length=100)),
                ("path", models.CharField(blank=True, max_length=200, null=True)),
                ("component", models.CharField(blank=True, max_length=100, null=True)),
                ("icon", models.CharField(blank=True, max_length=50, null=True)),
                ("order", models.IntegerField(default=0)),
                ("level", models.PositiveSmallIntegerField(default=1)),
                ("menu_type", models.CharField(
                    choices=[
                        ("menu", "메뉴 그룹"),
                        ("page", "페이지"),
                        ("button", "버튼 권한"),
                        ("link", "외부 링크"),
                        ("iframe", "iframe"),
                        ("dir", "디렉터리"),
                    ],
                    default="menu",
                    max_length=20,
                )),
                ("is_hidden", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("is_system", models.BooleanField(default=False)),
                ("permission_code", models.CharField(blank=True, max_length=100, null=True)),
                ("redirect", models.CharField(blank=True, max_length=200, null=True)),
                ("meta", models.JSONField(blank=True, null=True)),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("parent", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="children",
                    to="menus.menu",
                )),
            ],
            options={
                "ordering": ["order", "id"],
            },
        ),
        migrations.CreateModel(
            name="UserMenuOverride",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("permission_type", models.CharField(choices=[("grant", "허용"), ("deny", "거부")], max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("menu", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="user_overrides",
                    to="menus.menu",
                )),
                ("user", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="menu_overrides",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "db_table": "menus_user_menu_override",
                "unique_together": {("user", "menu")},
            },
        ),
    ]
