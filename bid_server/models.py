from dataclasses import dataclass

@dataclass
class Bid:
    user_id: int
    amount: float

    def copy(self) -> "Bid":
        return Bid(user_id=self.user_id, amount=self.amount)

@dataclass
class Session:
    user_id: int
    expires_at: float   # unix timestamp, seconds

    def copy(self) -> "Session":
        return Session(user_id=self.user_id, expires_at=self.expires_at)
