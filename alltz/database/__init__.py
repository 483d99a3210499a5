"""City database access for alltz."""

from .cities import CityDatabase, CityRecord

__all__ = ["CityDatabase", "CityRecord"]
