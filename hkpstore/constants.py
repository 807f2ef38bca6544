DEFAULT_DB_NAME = "hkp"
DEFAULT_COLLECTION_NAME = "keys"
DEFAULT_MONGO_URI = "mongodb://localhost:27017"

# v4 fingerprint length in hex characters
MAX_FINGERPRINT_LEN = 40

# cap on keyword / mtime / fetch scans
RESULT_LIMIT = 100

KEY_CHANGE_TOPIC = "hkp.keys.changed"
