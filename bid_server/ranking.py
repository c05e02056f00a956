import logging
import threading
from typing import Dict, List, Optional

from bid_server.models import Bid

logger = logging.getLogger(__name__)

MAX_BID_QUANTITY = 15

class BidRanking:
    """
    Top bids for a single item: at most `capacity` entries, one per user,
    sorted by amount descending. Equal amounts keep arrival order.

    Entries are kept sorted incrementally: every submission costs one
    backward scan over at most `capacity` slots.
    """

    def __init__(self, capacity: int = MAX_BID_QUANTITY) -> None:
        self.capacity = capacity
        self._bids: List[Bid] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._bids)

    @property
    def min_amount(self) -> Optional[float]:
        """Amount of the lowest ranked entry, None while empty."""
        return self._bids[-1].amount if self._bids else None

    def submit(self, bid: Bid) -> bool:
        """
        Incorporate a bid. Returns True if the ranking changed.
        """
        bid = bid.copy()
        with self._lock:
            if not self._bids:
                self._bids.append(bid)
                return True

            idx = self._find_user(bid.user_id)
            if idx is not None:
                if bid.amount > self._bids[idx].amount:
                    self._move_up(idx, bid)
                    return True
                return False

            full = len(self._bids) >= self.capacity
            if bid.amount <= self._bids[-1].amount:
                if full:
                    return False
                self._bids.append(bid)
                return True

            start = len(self._bids) - 2
            if full:
                # evict current minimum
                self._bids.pop()
            self._insert_from(start, bid)
            return True

    def snapshot(self) -> List[Bid]:
        with self._lock:
            return [b.copy() for b in self._bids]

    def _find_user(self, user_id: int) -> Optional[int]:
        for idx, existing in enumerate(self._bids):
            if existing.user_id == user_id:
                return idx
        return None

    def _insert_from(self, index: int, bid: Bid) -> None:
        # walk toward the front past strictly smaller amounts, then insert
        # right after the first entry that is >= (stable for same amount)
        while index >= 0 and self._bids[index].amount < bid.amount:
            index -= 1
        self._bids.insert(index + 1, bid)

    def _move_up(self, index: int, bid: Bid) -> None:
        # a raised bid can only move toward the front
        del self._bids[index]
        self._insert_from(index - 1, bid)


class RankingStore:
    """Item id -> BidRanking, created lazily on the first bid for an item."""

    def __init__(self, capacity: int = MAX_BID_QUANTITY) -> None:
        self.capacity = capacity
        self._rankings: Dict[int, BidRanking] = {}
        # guards ranking creation only; submissions lock per item
        self._lock = threading.Lock()

    def _ranking_for(self, item_id: int) -> BidRanking:
        ranking = self._rankings.get(item_id)
        if ranking is None:
            with self._lock:
                ranking = self._rankings.get(item_id)
                if ranking is None:
                    ranking = BidRanking(self.capacity)
                    self._rankings[item_id] = ranking
        return ranking

    def submit_bid(self, item_id: int, bid: Bid) -> bool:
        changed = self._ranking_for(item_id).submit(bid)
        logger.debug(f"Bid on item {item_id}: user {bid.user_id} amount {bid.amount} (changed={changed})")
        return changed

    def top_bids(self, item_id: int) -> Optional[List[Bid]]:
        """Ranked copy of the bids for item_id, or None for an unknown item."""
        ranking = self._rankings.get(item_id)
        if ranking is None:
            return None
        return ranking.snapshot()

    def item_count(self) -> int:
        return len(self._rankings)
