from typing import Callable
from frontend.stores.order_store import OrderStore


class Component:
    """
    OrderStore를 구독하는 화면 컴포넌트의 기본 클래스.

    mount() 시 store를 구독하고 unmount() 시 구독을 해제합니다.
    with 블록으로 사용하면 블록을 벗어날 때 반드시 구독이 해제됩니다.
    store 상태가 바뀔 때마다 render() 결과를 on_render 콜백으로 전달합니다.
    """

    def __init__(self, store: OrderStore, on_render: Callable[[str], None] | None = None):
        self.store = store
        self.on_render = on_render
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def mounted(self) -> bool:
        return self._unsubscribe is not None

    def mount(self):
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self.refresh)
        self.refresh()
        return self

    def unmount(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self):
        return self.mount()

    def __exit__(self, exc_type, exc, tb):
        self.unmount()

    def refresh(self):
        if self.on_render is not None:
            self.on_render(self.render())

    def render(self) -> str:
        raise NotImplementedError
