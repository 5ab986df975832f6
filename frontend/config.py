import os
from dotenv import load_dotenv

load_dotenv()

# 주문 서버 주소
ORDER_API_URL = os.getenv("ORDER_API_URL", "http://localhost:3000")
# 요청 전체 타임아웃(초)
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "10"))
# 제출 결과 메시지 표시 시간(초)
MESSAGE_TIMEOUT = 3.0
