import logging
import time
from typing import Callable, Dict

from application.task_list import TaskCollectionView
from domain.entities import Viewer
from infrastructure.database import TaskStore

logger = logging.getLogger(__name__)


class SessionRegistry:
    """One task list controller per signed-in user.

    An entry expires with the viewer's token (`exp` claim), or `idle_ttl`
    seconds after its last use when the token carries no expiry. Expired
    entries are closed and dropped on the next `open`.
    """

    def __init__(self, store_factory: Callable[[str], TaskStore], idle_ttl: float = 3600.0):
        self.store_factory = store_factory
        self.idle_ttl = idle_ttl
        self._views: Dict[str, TaskCollectionView] = {}
        self._expiry: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._views)

    def evict_expired(self) -> None:
        current_time = time.time()
        for user_id, expiry in list(self._expiry.items()):
            if current_time >= expiry:
                logger.debug(f"Task list session for {user_id} expired")
                self.close(user_id)

    async def open(self, viewer: Viewer, mount: bool = False) -> TaskCollectionView:
        """Returns the viewer's controller. `mount` forces a full read, as on page entry."""
        self.evict_expired()
        view = self._views.get(viewer.user_id)
        if view is None:
            logger.debug(f"New task list session for {viewer.user_id}")
            view = TaskCollectionView(self.store_factory(viewer.access_token))
            self._views[viewer.user_id] = view
        self._expiry[viewer.user_id] = viewer.expires_at or time.time() + self.idle_ttl
        if mount:
            await view.mount(viewer)
        else:
            await view.bind_viewer(viewer)
        return view

    def close(self, user_id: str) -> None:
        self._expiry.pop(user_id, None)
        view = self._views.pop(user_id, None)
        if view is not None:
            view.close()
            logger.debug(f"Task list session for {user_id} closed")
