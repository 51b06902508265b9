"""skillswap: peer-tutoring backend with skill and credibility scoring."""

__version__ = "0.1.0"
