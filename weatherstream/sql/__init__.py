"""SQL subset parser"""

from weatherstream.sql.parser import ParseError, parse

__all__ = ["parse", "ParseError"]
