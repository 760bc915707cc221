# run_backend.py
import os

from brand_tokens.app import create_app
from brand_tokens.models import db

app = create_app()
with app.app_context():
    db.create_all()

if __name__ == "__main__":
    app.run(host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "5000")),
            debug=False, use_reloader=False)
