"""keytrust - persistent OpenPGP key acceptance decisions."""

__version__ = "0.1.0"
