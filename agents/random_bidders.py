# random_bidders.py

import os
import time
import random
import requests
from agents.auction_client import AuctionClient

# This file launches a handful of bidders that hammer a few items with random
# bids and react to being outbid.  It is mainly a reference for how to use
# AuctionClient and a quick way to put concurrent load on a running server.

ITEMS = [1, 2, 3]

def make_client(user_id, server_url="http://localhost:8000", polling_rate=0.25):
    client = AuctionClient(server_url, user_id=user_id, item_ids=ITEMS, polling_rate=polling_rate)

    @client.on_outbid
    def on_outbid(item_id, bids):
        # 50% chance to answer with a slightly higher bid than the leader
        if not bids or random.random() < 0.5:
            return
        amount = round(bids[0].amount + random.uniform(0.5, 5.0), 2)
        try:
            client.bid(item_id, amount)
            print(f"[user {user_id}] → RAISE item {item_id} to {amount}")
        except requests.HTTPError as e:
            print(f"[user {user_id}] → RAISE failed: {e.response.status_code} {e.response.text}")

    return client


def main():
    num = int(os.getenv("NUM_BIDDERS", "20"))
    duration = float(os.getenv("DURATION", "15"))
    server_url = os.getenv("SERVER_URL", "http://localhost:8000")
    print(f"Spawning {num} bidders…")
    clients = [make_client(uid, server_url) for uid in range(1, num + 1)]

    deadline = time.time() + duration
    try:
        while time.time() < deadline:
            client = random.choice(clients)
            item_id = random.choice(ITEMS)
            amount = round(random.uniform(1, 100), 2)
            try:
                client.bid(item_id, amount)
            except requests.RequestException as e:
                print(f"[user {client.user_id}] → BID {amount}@{item_id} failed: {e}")
            time.sleep(0.01)
    except KeyboardInterrupt:
        pass
    finally:
        for c in clients:
            c.stop()

    print("\n--- Final Top Bids ---")
    for item_id in ITEMS:
        print(f"Item {item_id}:")
        for rank, b in enumerate(clients[0].top_bids(item_id), start=1):
            print(f"  {rank:2d}. user {b.user_id}: {b.amount}")


if __name__ == "__main__":
    main()
