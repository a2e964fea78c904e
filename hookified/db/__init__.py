from hookified.db.db_client import DBClient

db_client = DBClient()
