# backend/wsgi.py
from orderbyte import create_app

app = create_app()
