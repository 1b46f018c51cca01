# Overview: Flask extension instances for the store layer.

from flask_sqlalchemy import SQLAlchemy

# Records stay readable after the store lock commits and releases the session.
db = SQLAlchemy(session_options={"expire_on_commit": False})
