"""Allow ``python -m variant_conformance``."""

from .main import main

main()
