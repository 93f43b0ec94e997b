from dataclasses import dataclass


@dataclass(frozen=True)
class Owner:
    """Opaque identity of whoever a shortened URL belongs to.

    The pair is never dereferenced: it is only compared for equality and used
    to scope lookups and uniqueness checks.

    Attributes:
        owner_type (str):
            Kind of owner, e.g. 'User' or 'Organization'.
        owner_id (str):
            Identifier of the owner within its kind.

    Example:
        >>> Owner('User', '42') == Owner('User', '42')
        True
    """

    owner_type: str
    owner_id: str
