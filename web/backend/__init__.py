"""askflow transform backend.

Exposes the wire <-> editor flow transforms over HTTP so an editor front-end can
load and save agent flows without reimplementing the coercion rules.
"""

__version__ = "0.1.0"
