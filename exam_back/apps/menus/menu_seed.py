# 기본 메뉴 트리 (sync_menus 명령으로 DB 에 반영)
# component 는 프론트 컴포넌트 레지스트리 key

MENU_TREE = [
    {
        "code": "dashboard",
        "title": "대시보드",
        "path": "/dashboard",
        "component": "dashboard",
        "icon": "dashboard",
        "menu_type": "page",
        "is_system": True,
        "order": 10,
        "meta": {"keepAlive": False, "requireAuth": True},
    },

    # ===== 시험 관리 =====
    {
        "code": "exam",
        "title": "시험 관리",
        "path": "/exam",
        "icon": "file-text",
        "menu_type": "menu",
        "order": 10,
        "meta": {"requireAuth": True},
        "permission_code": "exam:view",
        "children": [
            {
                "code": "exam-list",
                "title": "시험 목록",
                "path": "/exam/list",
                "component": "exam-list",
                "menu_type": "page",
                "order": 2,
                "meta": {"requireAuth": True},
                "permission_code": "exam:list",
            },
            {
                "code": "exam-results",
                "title": "시험 결과",
                "path": "/results",
                "component": "results",
                "menu_type": "page",
                "order": 5,
                "meta": {"requireAuth": True},
                "permission_code": "exam:results",
            },
            {
                "code": "exam-practice",
                "title": "문제 연습",
                "path": "/questions/practice",
                "component": "question-practice",
                "menu_type": "page",
                "order": 20,
                "meta": {"requireAuth": True},
                "permission_code": "exam:practice",
            },
        ],
    },

    # ===== 문제 은행 =====
    {
        "code": "question",
        "title": "문제 은행",
        "path": "/questions",
        "component": "questions",
        "icon": "question-circle",
        "menu_type": "menu",
        "order": 30,
        "meta": {"requireAuth": True},
        "permission_code": "question:view",
        "children": [
            {
                "code": "question-maintain",
                "title": "문제 관리",
                "path": "/admin/questions",
                "component": "questions",
                "menu_type": "page",
                "order": 1,
                "meta": {"requireAuth": True},
            },
        ],
    },

    # ===== 사용자 관리 =====
    {
        "code": "user",
        "title": "사용자 관리",
        "path": "/admin/users",
        "component": "user-manage",
        "icon": "user",
        "menu_type": "menu",
        "order": 40,
        "meta": {"requireAuth": True},
        "permission_code": "user:view",
    },

    # ===== 학습 센터 =====
    {
        "code": "learning",
        "title": "학습 센터",
        "path": "/learning",
        "icon": "book",
        "menu_type": "menu",
        "order": 120,
        "meta": {"requireAuth": True},
        "permission_code": "learning:view",
        "children": [
            {
                "code": "learning-progress",
                "title": "학습 진도",
                "path": "/learning/progress",
                "component": "learning-progress",
                "menu_type": "page",
                "order": 4,
                "meta": {"requireAuth": True},
                "permission_code": "learning:progress",
            },
            {
                "code": "learning-favorites",
                "title": "즐겨찾기",
                "path": "/favorites",
                "component": "favorites",
                "menu_type": "page",
                "order": 7,
                "meta": {"requireAuth": True},
                "permission_code": "learning:favorites",
            },
            {
                "code": "learning-wrong",
                "title": "오답 노트",
                "path": "/wrong-questions",
                "component": "wrong-questions",
                "menu_type": "page",
                "order": 11,
                "meta": {"requireAuth": True},
                "permission_code": "learning:wrong",
            },
            {
                "code": "learning-discussion",
                "title": "토론 게시판",
                "path": "/discussion",
                "component": "discussion",
                "menu_type": "page",
                "order": 14,
                "meta": {"requireAuth": True},
                "permission_code": "learning:discussion",
            },
            {
                "code": "learning-leaderboard",
                "title": "랭킹",
                "path": "/leaderboard",
                "component": "leaderboard",
                "menu_type": "page",
                "order": 17,
                "meta": {"requireAuth": True},
                "permission_code": "learning:leaderboard",
            },
        ],
    },

    # ===== 데이터 분석 =====
    {
        "code": "analytics",
        "title": "데이터 분석",
        "path": "/analytics",
        "component": "analytics",
        "icon": "bar-chart",
        "menu_type": "menu",
        "order": 130,
        "meta": {"requireAuth": True},
        "permission_code": "analytics:view",
    },

    # ===== 내 정보 =====
    {
        "code": "profile",
        "title": "내 정보",
        "path": "/profile",
        "component": "profile",
        "icon": "user",
        "menu_type": "menu",
        "order": 140,
        "meta": {"requireAuth": True},
        "permission_code": "profile:view",
    },

    # ===== 시스템 관리 =====
    {
        "code": "admin",
        "title": "시스템 관리",
        "path": "/admin",
        "icon": "setting",
        "menu_type": "menu",
        "order": 100,
        "children": [
            {
                "code": "admin-org",
                "title": "조직 관리",
                "path": "/orgs",
                "component": "admin-org",
                "menu_type": "page",
                "order": 1,
            },
            {
                "code": "admin-role",
                "title": "역할 관리",
                "path": "/admin/roles",
                "component": "admin-role",
                "menu_type": "page",
                "order": 2,
            },
            {
                "code": "system-settings",
                "title": "시스템 설정",
                "path": "/settings",
                "component": "settings",
                "icon": "setting",
                "menu_type": "page",
                "order": 3,
                "meta": {"requireAuth": True},
                "permission_code": "system:settings",
            },
            {
                "code": "system-logs",
                "title": "시스템 로그",
                "path": "/logs",
                "component": "logs",
                "icon": "file-text",
                "menu_type": "page",
                "order": 6,
                "meta": {"requireAuth": True},
                "permission_code": "system:logs",
            },
            {
                "code": "system-tasks",
                "title": "과제 관리",
                "path": "/tasks",
                "icon": "calendar",
                "menu_type": "menu",
                "order": 70,
                "meta": {"requireAuth": True},
                "permission_code": "system:tasks",
                "children": [
                    {
                        "code": "task-my",
                        "title": "내 과제",
                        "path": "/tasks/my",
                        "component": "task-my",
                        "menu_type": "page",
                        "order": 1,
                        "meta": {"requireAuth": True},
                        "permission_code": "system:tasks:my",
                    },
                    {
                        "code": "task-publish",
                        "title": "과제 배포",
                        "path": "/tasks/publish",
                        "component": "task-publish",
                        "menu_type": "page",
                        "order": 2,
                        "meta": {"requireAuth": True},
                        "permission_code": "system:tasks:publish",
                    },
                ],
            },
            {
                "code": "system-menus",
                "title": "메뉴 관리",
                "path": "/admin/menus",
                "component": "menu-manage",
                "icon": "menu",
                "menu_type": "page",
                "order": 110,
                "meta": {"requireAuth": True},
                "permission_code": "system:menus",
            },
        ],
    },

    # ===== 오류 페이지 =====
    {
        "code": "error-management",
        "title": "오류 페이지 관리",
        "path": "/errors",
        "component": "errors",
        "icon": "warning",
        "menu_type": "menu",
        "order": 50,
        "is_system": True,
        "children": [
            {
                "code": "errors-403",
                "title": "403 권한 없음",
                "path": "/errors/403",
                "component": "errors-403",
                "menu_type": "page",
                "order": 1,
            },
            {
                "code": "errors-404",
                "title": "404 페이지 없음",
                "path": "/errors/404",
                "component": "errors-404",
                "menu_type": "page",
                "order": 2,
            },
            {
                "code": "errors-500",
                "title": "500 서버 오류",
                "path": "/errors/500",
                "component": "errors-500",
                "menu_type": "page",
                "order": 3,
            },
        ],
    },
]

# 기본 역할 (seed_roles 명령으로 DB 에 반영)
DEFAULT_ROLES = [
    {"code": "SUPER_ADMIN", "name": "최고 관리자", "sort_order": 1, "is_system": True},
    {"code": "ADMIN", "name": "관리자", "sort_order": 2, "is_system": True},
    {"code": "TEACHER", "name": "교사", "sort_order": 3, "is_system": True},
    {"code": "STUDENT", "name": "학생", "sort_order": 4, "is_system": True},
]
