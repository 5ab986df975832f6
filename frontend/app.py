import asyncio
import logging
import shlex
import sys
from pathlib import Path
from typing import Callable, Dict, List
from frontend.api.order_api import OrderApiClient
from frontend.components.order_form import OrderForm
from frontend.components.order_table import OrderTable
from frontend.config import MESSAGE_TIMEOUT, ORDER_API_URL
from frontend.stores.order_store import OrderStore
from backend.utils.log_config import setup_logging

# YAML 파일 경로
LOGGING_CONFIG_PATH = Path(__file__).resolve().parent.parent / "client_logging_config.yaml"

logger = logging.getLogger(__name__)

HELP = """Commands:
  set <field> <value>   symbol | orderType | quantity | price | stopPrice | side
  submit                validate and submit the order
  refresh               reload all orders from the server
  clear                 clear all orders
  show                  redraw the form and the table
  help                  show this help
  quit                  exit"""


class Screen:
    """
    컴포넌트별 최신 렌더링 결과를 모아두었다가 flush() 시 바뀐 부분만 출력합니다.

    live가 True인 동안(입력 대기 중)에는 바뀐 화면을 즉시 출력합니다.
    예: 입력을 기다리는 사이 만료된 결과 메시지가 지워진 폼.
    """

    def __init__(self, write: Callable[[str], None] = print):
        self.write = write
        self.live = False
        self._frames: Dict[str, str] = {}
        self._order: List[str] = []
        self._dirty: set[str] = set()

    def updater(self, name: str) -> Callable[[str], None]:
        if name not in self._order:
            self._order.append(name)

        def update(text: str):
            if self._frames.get(name) != text:
                self._frames[name] = text
                self._dirty.add(name)
                if self.live:
                    self.flush()

        return update

    def flush(self, force: bool = False):
        for name in self._order:
            if name in self._frames and (force or name in self._dirty):
                self.write(self._frames[name])
                self.write("")
        self._dirty.clear()


async def handle_command(line: str, form: OrderForm, table: OrderTable, store: OrderStore,
                         screen: Screen) -> bool:
    """
    명령 한 줄을 처리합니다.

    Returns:
        bool: 계속 실행하면 True, 종료 명령이면 False.
    """
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        screen.write(f"Invalid command: {e}")
        return True
    if not tokens:
        return True

    command, args = tokens[0].lower(), tokens[1:]
    if command in ("quit", "exit"):
        return False
    if command == "help":
        screen.write(HELP)
    elif command == "set":
        if len(args) < 2:
            screen.write("Usage: set <field> <value>")
        else:
            try:
                form.set_field(args[0], " ".join(args[1:]))
            except ValueError as e:
                screen.write(str(e))
    elif command == "submit":
        if not form.submit_enabled:
            screen.write("An order is already being submitted.")
        else:
            await form.submit()
    elif command == "refresh":
        await store.fetch_all()
    elif command == "clear":
        await table.clear()
    elif command == "show":
        screen.flush(force=True)
    else:
        screen.write(f"Unknown command: {command} (type 'help')")
    return True


async def run(api_url: str = ORDER_API_URL, read_line: Callable[[str], str] = input,
              screen: Screen | None = None, message_timeout: float = MESSAGE_TIMEOUT):
    """
    주문 화면을 실행합니다. 시작 시 서버의 주문 목록을 불러온 뒤 명령을 반복해서 처리합니다.
    """
    screen = screen or Screen()
    async with OrderApiClient(api_url) as api:
        store = OrderStore(api)
        form = OrderForm(store, on_render=screen.updater("form"), message_timeout=message_timeout)
        table = OrderTable(store, on_render=screen.updater("table"), color=sys.stdout.isatty())
        with form, table:
            logger.info(f"Order client connected to {api_url}")
            await store.fetch_all()
            screen.flush()
            screen.write(HELP)
            while True:
                screen.live = True
                try:
                    line = await asyncio.to_thread(read_line, "order> ")
                except EOFError:
                    break
                finally:
                    screen.live = False
                if not await handle_command(line, form, table, store, screen):
                    break
                screen.flush()


def main():
    setup_logging(LOGGING_CONFIG_PATH)
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
