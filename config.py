import os
from dotenv import load_dotenv

load_dotenv()

# Токен бота из .env файла
BOT_TOKEN = os.getenv('BOT_TOKEN')

# Хранилище сессий: 'sqlite' (файл DB_PATH) или 'memory'
STORAGE = os.getenv('STORAGE', 'sqlite')
DB_PATH = os.getenv('DB_PATH', 'sessions.db')

# Каталог тренировок, по умолчанию встроенный catalog/workout.json
CATALOG_PATH = os.getenv('CATALOG_PATH') or None

# Настройки
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

# Команды бота и их описания
COMMANDS = {
    'help': 'display this text.',
    'start': 'choose a training.',
    'cancel': 'leave the current training.',
}
