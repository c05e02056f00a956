import time
import threading
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests
import random

# ---- Data models ----
@dataclass
class TopBid:
    """
    One entry of an item's top bid list as served by the auction server.
    """
    user_id: int
    amount: float

# Type aliases for event handlers
HandlerUpdate = Callable[[int, List[TopBid]], None]
HandlerOutbid = Callable[[int, List[TopBid]], None]

class AuctionClient:
    def __init__(
        self,
        server_url: str,
        user_id: int,
        item_ids: Iterable[int] = (),
        polling_rate: float = 1.0,
        jitter_factor: float = 0.1
    ) -> None:
        """
        Initialize the auction client.
        Args:
            server_url: Base URL of the bid server.
            user_id: User to log in as.
            item_ids: Items whose top bid lists are watched; no polling if empty.
            polling_rate: Seconds between polling cycles.
        """
        self.server_url: str = server_url.rstrip("/")
        self.user_id: int = user_id
        self.item_ids: List[int] = list(item_ids)
        self.polling_rate: float = polling_rate
        self.jitter_factor: float = jitter_factor
        self.session_key: Optional[str] = None

        # Event handlers
        self._handlers: Dict[str, List[Callable[..., None]]] = {
            "update": [],  # HandlerUpdate
            "outbid": [],  # HandlerOutbid
        }

        # Internal state
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_bids: Dict[int, List[TopBid]] = {}

        try:
            self.login()
        except Exception:
            logging.exception("Error logging in to bid server")
            self.session_key = None
        if self.item_ids:
            self._start_polling()

    def login(self) -> str:
        """Obtain a fresh session key. Any previous key stops working."""
        response = requests.get(f"{self.server_url}/{self.user_id}/login")
        response.raise_for_status()
        self.session_key = response.text
        return self.session_key

    def bid(self, item_id: int, amount: float) -> None:
        """
        Submit a bid. Logs in first if there is no session yet, and once
        more if the server rejects the current one.
        """
        if self.session_key is None:
            self.login()
        response = self._post_bid(item_id, amount)
        if response.status_code == 403:
            self.login()
            response = self._post_bid(item_id, amount)
        response.raise_for_status()

    def _post_bid(self, item_id: int, amount: float) -> requests.Response:
        return requests.post(
            f"{self.server_url}/{item_id}/bid",
            params={"sessionKey": self.session_key},
            data=str(amount)
        )

    def top_bids(self, item_id: int) -> List[TopBid]:
        response = requests.get(f"{self.server_url}/{item_id}/topBidList")
        response.raise_for_status()
        bids = []
        for entry in response.json():
            for uid, amount in entry.items():
                bids.append(TopBid(user_id=int(uid), amount=float(amount)))
        return bids

    def status(self) -> Dict[str, Any]:
        response = requests.get(f"{self.server_url}/status")
        response.raise_for_status()
        return response.json()

    def _start_polling(self) -> None:
        """Start the background polling thread."""
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True
        )
        self._thread.start()

    def _poll_loop(self) -> None:
        """Continuously poll the watched items and dispatch events."""
        while not self._stop_event.is_set():
            for item_id in self.item_ids:
                try:
                    self._process_bids(item_id, self.top_bids(item_id))
                except Exception:
                    logging.exception(f"Error polling top bids for item {item_id}")
            # apply uniform jitter around polling_rate
            jitter = random.uniform(-self.jitter_factor, self.jitter_factor) * self.polling_rate
            sleep_time = max(self.polling_rate + jitter, 0.0)
            time.sleep(sleep_time)

    def _process_bids(self, item_id: int, bids: List[TopBid]) -> None:
        """
        Compare the new top list for an item with the previous one and fire
        any relevant event handlers.
        """
        prev = self._last_bids.get(item_id, [])
        if bids == prev:
            return
        self._last_bids[item_id] = bids

        for fn in list(self._handlers["update"]):
            try:
                fn(item_id, bids)
            except Exception:
                logging.exception("on_update error")

        # outbid: dropped off the list, or lost first place
        was_listed = any(b.user_id == self.user_id for b in prev)
        is_listed = any(b.user_id == self.user_id for b in bids)
        lost_lead = bool(prev) and prev[0].user_id == self.user_id \
            and bool(bids) and bids[0].user_id != self.user_id
        if (was_listed and not is_listed) or lost_lead:
            for fn in list(self._handlers["outbid"]):
                try:
                    fn(item_id, bids)
                except Exception:
                    logging.exception("on_outbid error")

    # Event registration methods
    def on_update(self, fn: HandlerUpdate) -> HandlerUpdate:
        self._handlers["update"].append(fn)
        return fn

    def on_outbid(self, fn: HandlerOutbid) -> HandlerOutbid:
        self._handlers["outbid"].append(fn)
        return fn

    def stop(self) -> None:
        """Stop the polling thread and clean up."""
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join()
