from shortlinks.models.owner_model import Owner
from shortlinks.models.shortened_url_model import ShortenedURLModel
from shortlinks.models.destination import Destination, RawDestination, ExistingRecord, as_destination


__all__ = [
    'Owner',
    'ShortenedURLModel',
    'Destination',
    'RawDestination',
    'ExistingRecord',
    'as_destination',
]
