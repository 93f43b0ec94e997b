from dataclasses import dataclass
from datetime import datetime, UTC

from shortlinks.models.owner_model import Owner


@dataclass(frozen=True)
class ShortenedURLModel:
    """Represent a shortened URL mapping.

    Attributes:
        url (str):
            Normalized destination URL the token resolves to.
        unique_key (str):
            Globally unique public token.
        category (Optional[str]):
            Partition of the url uniqueness scope. None is the default partition.
        owner (Optional[Owner]):
            Identity the record is scoped to. None for global records.
        use_count (int):
            Number of tracked resolutions.
        expires_at (Optional[datetime]):
            Moment after which the token no longer resolves. None never expires.
            Naive datetimes (here and in the timestamps below) are taken as UTC.
        created_at (Optional[datetime]):
            Set by the data store on insert.
        updated_at (Optional[datetime]):
            Set by the data store on every write.

    Example:
        >>> from datetime import datetime, timedelta, UTC
        >>> link = ShortenedURLModel(
        ...     url='https://example.com/article/123',
        ...     unique_key='x7k2p',
        ...     expires_at=datetime.now(UTC) + timedelta(days=30),
        ... )
        >>> link.to_param()
        'x7k2p'
        >>> link.is_expired()
        False
    """

    url: str
    unique_key: str
    category: str | None = None
    owner: Owner | None = None
    use_count: int = 0
    expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        # Naive datetimes are taken as UTC so every comparison is between aware values
        for name in ('expires_at', 'created_at', 'updated_at'):
            value = getattr(self, name)
            if value is not None and value.tzinfo is None:
                object.__setattr__(self, name, value.replace(tzinfo=UTC))

    def to_param(self) -> str:
        return self.unique_key

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True when expires_at is set and not in the future."""
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or datetime.now(UTC))
