import logging

from inventory_core.errors import InvalidDataError
from inventory_core.store import SETTINGS

logger = logging.getLogger(__name__)


class SettingsService:
    """Single settings record; currently only the USD -> ETB exchange rate."""

    def __init__(self, store, default_exchange_rate=115):
        self.store = store
        self.default_exchange_rate = default_exchange_rate

    def defaults(self):
        return {'exchange_rate_usd_etb': self.default_exchange_rate}

    def get(self):
        stored = self.store.get(SETTINGS)
        settings = self.defaults()
        if stored:
            settings.update(stored[0])
        return settings

    def save(self, settings):
        rate = settings.get('exchange_rate_usd_etb')
        if isinstance(rate, bool) or not isinstance(rate, (int, float)) or rate <= 0:
            raise InvalidDataError("Exchange rate must be a number greater than 0.")
        record = self.get()
        record['exchange_rate_usd_etb'] = rate
        self.store.put(SETTINGS, [record])
        logger.info(f"Exchange rate set to {rate}")
        return record

    def exchange_rate(self):
        return self.get()['exchange_rate_usd_etb']
