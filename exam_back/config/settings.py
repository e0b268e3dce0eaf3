import environ
import os
from .base import * # 공통 설정
from corsheaders.defaults import default_headers
from dotenv import load_dotenv
load_dotenv()


# env 초기화 (.env 파일에서 환경변수 로드)
env = environ.Env()
environ.Env.read_env(os.path.join(BASE_DIR, '.env'))


SECRET_KEY = env('SECRET_KEY', default=SECRET_KEY)
DEBUG = env.bool('DEBUG', default=False)

# ALLOWED_HOSTS 설정
# 운영 환경에서는 .env에서 ALLOWED_HOSTS를 명시적으로 설정하세요
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["127.0.0.1", "localhost", "testserver"])


# 데이터베이스 설정
# MYSQL_DB 가 없으면 base.py 의 SQLite 사용 (개발 / 테스트)
if env('MYSQL_DB', default=None):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.mysql',
            'NAME': env('MYSQL_DB'),
            'USER': env('MYSQL_USER'),
            'PASSWORD': env('MYSQL_PASSWORD'),
            'HOST': env('MYSQL_HOST', default='127.0.0.1'),
            'PORT': env('MYSQL_PORT', default='3306'),
            'OPTIONS': {
                'charset': 'utf8mb4',
                'init_command': "SET time_zone='+09:00'",
            },
        },
    }


# Channels 설정
# REDIS_HOST 가 있으면 Redis 채널 레이어, 없으면 InMemory (단일 프로세스)
REDIS_HOST = env('REDIS_HOST', default=None)
REDIS_PORT = env.int('REDIS_PORT', default=6379)

if REDIS_HOST:
    CHANNEL_LAYERS = {
        "default": {
            "BACKEND": "channels_redis.core.RedisChannelLayer",
            "CONFIG": {
                "hosts": [(REDIS_HOST, REDIS_PORT)],
            },
        }
    }


# CORS 옵션 추가
# 허용할 오리진 지정 (지정하면 전체 허용 해제)
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=[])
if CORS_ALLOWED_ORIGINS:
    CORS_ALLOW_ALL_ORIGINS = False

# 헤더 허용 (Authorization 등) : default_headers(기본 헤더) +  Authorization 추가
CORS_ALLOW_HEADERS = list(default_headers) + [
    "authorization",
]
# 쿠키를 포함한 cross-origin 요청
CORS_ALLOW_CREDENTIALS = True


# 메뉴 트리 최대 깊이
MENU_TREE_MAX_DEPTH = env.int("MENU_TREE_MAX_DEPTH", default=MENU_TREE_MAX_DEPTH)

LOG_LEVEL = env("LOG_LEVEL", default=LOG_LEVEL)
for _logger in ("access", "apps", "utils"):
    LOGGING["loggers"][_logger]["level"] = LOG_LEVEL
