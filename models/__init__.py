"""
Models package: exposes the process-wide DBStorage instance.
The engine is built by api.create_app() via storage.configure().
"""
from models.db_storage import DBStorage

storage = DBStorage()
