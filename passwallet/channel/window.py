"""In-process browsing contexts connected by ``postMessage``.

A merchant page and the wallet surface embedded in it each run in their
own single-threaded context. Messages are cloned and delivered on a later
turn of the event loop, never synchronously, and only when the sender's
target origin matches the receiving context.
"""

import asyncio
import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

log = logging.getLogger(__name__)

ANY_ORIGIN = '*'


@dataclass(frozen=True)
class MessageEvent:
    origin: str
    data: Any
    source: Optional['BrowsingContext']


class BrowsingContext:
    """A window (top-level page or iframe) with a fixed origin."""
    
    def __init__(self, origin, parent=None, name=None):
        self.origin = origin
        self.parent = parent
        self.name = name or origin
        self.closed = False
        self._listeners: List[Callable[[MessageEvent], None]] = []
    
    def add_listener(self, listener):
        if listener not in self._listeners:
            self._listeners.append(listener)
    
    def remove_listener(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)
    
    def post_message(self, data, target_origin, source=None):
        """Queue ``data`` for delivery to this context.
        
        Args:
            data: Structured-cloneable payload
            target_origin: Origin this context must have, or ``*``
            source: The context sending the message
        """
        if target_origin != ANY_ORIGIN and target_origin != self.origin:
            log.debug(f"Dropped message for {target_origin} posted to {self.origin}")
            return
        event = MessageEvent(
            origin=source.origin if source else self.origin,
            data=copy.deepcopy(data),
            source=source,
        )
        asyncio.get_running_loop().call_soon(self._dispatch, event)
    
    def _dispatch(self, event):
        if self.closed:
            return
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                log.exception(f"Message listener failed in {self.name}")
    
    def close(self):
        self.closed = True
        self._listeners.clear()
    
    def __repr__(self):
        return f'<BrowsingContext {self.name}>'
