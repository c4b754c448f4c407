"""
Persistence package. `storage` is the process-wide DBStorage; the engine is
bound by create_app() through storage.reload().
"""
from models.db_storage import DBStorage

storage = DBStorage()
