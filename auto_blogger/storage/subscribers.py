"""Newsletter subscriber persistence."""
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError
from auto_blogger.storage.db import utcnow
from auto_blogger.logging_cfg.logger import setup_logger

logger = setup_logger()


class SubscriberStore:
    def __init__(self, collection: Collection):
        self.collection = collection

    def add(self, email: str) -> bool:
        """Store a subscriber. Returns False when the address is already subscribed."""
        email = email.strip().lower()
        if self.collection.find_one({'email': email}):
            return False

        try:
            self.collection.insert_one({'email': email, 'subscribed_at': utcnow()})
        except DuplicateKeyError:
            return False

        logger.info(f"New subscriber: {email}")
        return True

    def count(self) -> int:
        return self.collection.count_documents({})
