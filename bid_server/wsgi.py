import os
from dotenv import load_dotenv
load_dotenv()

from bid_server import db
from bid_server.api import app
from bid_server.ranking import RankingStore
from bid_server.sessions import SessionManager

if db.enabled():
    db.init_db()
app.rankings = RankingStore()
app.sessions = SessionManager()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "8000")), threaded=True)
