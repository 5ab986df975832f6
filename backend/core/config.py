import os
from dotenv import load_dotenv

load_dotenv()

# 서버 설정
HOST = os.getenv("HOST", "localhost")
PORT = int(os.getenv("PORT", "3000"))

# development / production
APP_ENV = os.getenv("APP_ENV", "development").lower()
DEV = APP_ENV != "production"
