import math
import re
from typing import Optional
from flask import Flask, request, jsonify, current_app

from bid_server import db
from bid_server.models import Bid

app = Flask(__name__)

TEXT = {"Content-Type": "text/plain; charset=utf-8"}

# plain ASCII decimals only: no underscores, whitespace or unicode digits
INT_RE = re.compile(r"[+-]?[0-9]+")
AMOUNT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

def _parse_int(raw: str) -> Optional[int]:
    if raw is None or not INT_RE.fullmatch(raw):
        return None
    return int(raw)

def _parse_amount(raw: str) -> Optional[float]:
    if raw is None or not AMOUNT_RE.fullmatch(raw):
        return None
    amount = float(raw)
    return amount if math.isfinite(amount) else None

def _format_amount(amount: float) -> str:
    # 20.0 -> "20", 20.5 -> "20.5", 1e21 -> "1e+21"
    if float(amount).is_integer() and abs(amount) < 1e21:
        return str(int(amount))
    return repr(float(amount))

@app.route("/<user_id>/login", methods=["GET"])
def login(user_id):
    uid = _parse_int(user_id)
    if uid is None:
        return "Invalid userID", 400, TEXT
    key = current_app.sessions.login(uid)
    if db.enabled():
        db.log_login(uid)
    return key, 200, TEXT

@app.route("/<item_id>/bid", methods=["POST"])
def bid(item_id):
    key = request.args.get("sessionKey")
    if not key:
        return "Missing sessionKey", 400, TEXT
    uid = current_app.sessions.validate(key)
    if uid is None:
        return "Invalid sessionKey", 403, TEXT
    iid = _parse_int(item_id)
    amount = _parse_amount(request.get_data(as_text=True))
    if iid is None or amount is None:
        return "Invalid bid", 400, TEXT
    new_bid = Bid(user_id=uid, amount=amount)
    ranked = current_app.rankings.submit_bid(iid, new_bid)
    if db.enabled():
        db.log_bid(iid, new_bid, ranked)
    return "", 200

@app.route("/<item_id>/topBidList", methods=["GET"])
def top_bid_list(item_id):
    iid = _parse_int(item_id)
    if iid is None:
        return "Invalid itemID", 400, TEXT
    bids = current_app.rankings.top_bids(iid) or []
    return jsonify([{str(b.user_id): _format_amount(b.amount)} for b in bids]), 200

@app.route("/status", methods=["GET"])
def status():
    return jsonify(status="ok",
                   items=current_app.rankings.item_count(),
                   sessions=current_app.sessions.active_count()), 200
