"""Destinations accepted by the link generation protocol

A destination is either a raw URL that still has to be normalized, or a
record produced by an earlier generation. Passing a record asks for the same
mapping under a (possibly different) owner instead of minting a new token.

Classes:
    RawDestination:
        Raw destination URL string.
    ExistingRecord:
        Previously generated ShortenedURLModel.

Functions:
    as_destination(value) -> Destination
        Wrap a plain string or record into the matching variant.
"""

from dataclasses import dataclass

from shortlinks.models.shortened_url_model import ShortenedURLModel


@dataclass(frozen=True)
class RawDestination:
    url: str


@dataclass(frozen=True)
class ExistingRecord:
    record: ShortenedURLModel


type Destination = RawDestination | ExistingRecord


def as_destination(value: 'Destination | ShortenedURLModel | str') -> Destination:
    """Wrap a plain value into a Destination variant

    Args:
        value (Destination | ShortenedURLModel | str):
            Already wrapped destination, a generated record, or a raw URL.

    Returns:
        Destination: RawDestination or ExistingRecord.

    Raises:
        TypeError:
            If the value is none of the accepted types.

    Example:
        >>> as_destination('example.com/page')
        RawDestination(url='example.com/page')
    """
    match value:
        case RawDestination() | ExistingRecord():
            return value
        case ShortenedURLModel():
            return ExistingRecord(value)
        case str():
            return RawDestination(value)
        case _:
            raise TypeError(f'Destination must be a URL string or a ShortenedURLModel (given type: {type(value)}).')
