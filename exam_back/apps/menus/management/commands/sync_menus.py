from django.core.management.base import BaseCommand

from apps.accounts.models import Role
from apps.menus.menu_seed import DEFAULT_ROLES
from apps.menus.menu_sync import SYNC_MODES, sync_menus


class Command(BaseCommand):
    help = "Sync the menu catalog from the seed tree (menu_seed.MENU_TREE)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--mode",
            choices=SYNC_MODES,
            default="patch",
            help="patch: 구조 유지 / force: 구조 덮어쓰기 / insert-only: 신규 메뉴만 추가",
        )
        parser.add_argument(
            "--remove-orphans",
            action="store_true",
            help="seed 에 없는 메뉴 삭제",
        )
        parser.add_argument(
            "--with-roles",
            action="store_true",
            help="기본 역할(SUPER_ADMIN, ADMIN, TEACHER, STUDENT)도 함께 생성",
        )

    def handle(self, *args, **options):
        self.stdout.write("=" * 60)
        self.stdout.write(f"Menu Sync (mode={options['mode']})")
        self.stdout.write("=" * 60)

        result = sync_menus(
            mode=options["mode"],
            remove_orphans=options["remove_orphans"],
        )

        for code in result.created:
            self.stdout.write(f"  Created: {code}")
        for code in result.updated:
            self.stdout.write(f"  Updated: {code}")
        for code in result.skipped:
            self.stdout.write(f"  Exists: {code}")
        for code in result.removed:
            self.stdout.write(self.style.WARNING(f"  Removed: {code}"))

        if options["with_roles"]:
            self.stdout.write("\n[Roles]")
            for role_data in DEFAULT_ROLES:
                role, created = Role.objects.get_or_create(
                    code=role_data["code"],
                    defaults=role_data,
                )
                self.stdout.write(f"  {'Created' if created else 'Exists'}: {role.code}")

        self.stdout.write(self.style.SUCCESS(
            f"\n메뉴 동기화 완료: {result.synced}개 (삭제 {len(result.removed)}개)"
        ))
