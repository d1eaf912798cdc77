import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
DEBUG = os.getenv('DEBUG', '0') == '1'

INSTALLED_APPS = [
    'labwizard',
]

# 向导草稿只在内存里，不需要数据库
DATABASES = {}

USE_TZ = True
TIME_ZONE = 'UTC'

# Order placement
# memory: 进程内保存（默认）；log: 写到日志
LABWIZARD_ORDER_PLACER = os.getenv('LABWIZARD_ORDER_PLACER', 'memory')

# 这些材料是纯金属，不需要比色（第 6 步跳过）
LABWIZARD_METAL_ONLY_MATERIALS = ['full-metal', 'gold', 'gold-inlay']

# Logging
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'labwizard': {
            'handlers': ['console'],
            'level': 'DEBUG' if DEBUG else os.getenv('LABWIZARD_LOG_LEVEL', 'INFO'),
        },
    },
}
